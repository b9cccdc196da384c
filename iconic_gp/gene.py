import math

import numpy as np


class Gene:
    """A token of a linear genome, and a node of its decoded tree

    A gene holds either a Primitive (function), a feature index (terminal) or
    a numeric value (constant). Decoding attaches `children` and `parent`.
    """

    #++++++++++++++++++++++++++++
    #   Initialize              |
    #++++++++++++++++++++++++++++

    def __init__(self, primitive=None, feature=None, value=None, labels=None):
        self.primitive = primitive
        self.feature = feature
        self.value = value
        self.labels = labels
        self.parent = None
        self.children = None

    @classmethod
    def function(cls, primitive):
        return cls(primitive=primitive)

    @classmethod
    def terminal(cls, feature, labels=None):
        return cls(feature=feature, labels=labels)

    @classmethod
    def constant(cls, value):
        return cls(value=value)

    def copy(self):
        """Return an unlinked copy of self (no parent or children)"""
        return Gene(self.primitive, self.feature, self.value, self.labels)

    #++++++++++++++++++++++++++++
    #   Query                   |
    #++++++++++++++++++++++++++++

    @property
    def node_type(self):
        if self.primitive is not None:
            return 'function'
        elif self.feature is not None:
            return 'terminal'
        return 'constant'

    @property
    def arity(self):
        return 0 if self.primitive is None else self.primitive.arity

    @property
    def label(self):
        if self.primitive is not None:
            return self.primitive.label
        elif self.feature is not None:
            if self.labels is None:
                return f'f{self.feature}'
            return self.labels[self.feature]
        return self.value

    @property
    def depth(self):
        """Return the number of edges on the longest path down to a leaf"""
        if not self.children:
            return 0
        return 1 + max(child.depth for child in self.children)

    @property
    def n_children(self):
        """Return the number of genes below this one in the decoded tree"""
        if not self.children:
            return 0
        return sum(1 + child.n_children for child in self.children)

    @property
    def n_cols(self):
        """Return the number of leaves below (or at) this gene"""
        if not self.children:
            return 1
        return sum(child.n_cols for child in self.children)

    #++++++++++++++++++++++++++++
    #   Display                 |
    #++++++++++++++++++++++++++++

    def __repr__(self):
        return f"<Gene: {self.node_type} {self.label!r}>"

    def parse(self, ws=''):
        """Parse the subtree to a fully parenthesised string"""
        if not self.children:
            return f'({self.label})'
        args = [c.parse(ws) for c in self.children]
        return f'({self.primitive.format(args, ws)})'

    def display_viz(self, width=60, label_max_len=3):
        """Return a printable tree, one text row per depth

        Each gene is centred in a slot of its row. Its children split the slot
        in proportion to their leaf counts, and a rule of '_' joins the centre
        of the first child to the centre of the last.
        """
        rows = []
        level = [(self, width)]
        for _ in range(self.depth + 1):
            row, next_level = '', []
            for gene, slot in level:
                text = '' if gene is None else str(gene.label)[:label_max_len]
                cell = text.center(slot)
                if gene is None or not gene.children:
                    next_level.append((None, slot))
                else:
                    slots = self._split_slot(gene, slot)
                    next_level.extend(zip(gene.children, slots))
                    start, end = slots[0] // 2, slot - slots[-1] // 2
                    cell = ''.join('_' if start < i < end and ch == ' ' else ch
                                   for i, ch in enumerate(cell))
                row += cell
            rows.append(row)
            level = next_level
        return '\n'.join(rows) + '\n'

    @staticmethod
    def _split_slot(gene, slot):
        """Divide a slot among the children of gene by their leaf counts"""
        slots, used, leaves = [], 0, 0
        for child in gene.children:
            leaves += child.n_cols
            share = min(math.ceil(leaves / gene.n_cols * slot) - used,
                        slot - used)
            slots.append(share)
            used += share
        return slots

    #++++++++++++++++++++++++++++
    #   Predict                 |
    #++++++++++++++++++++++++++++

    def predict(self, X):
        """Return the value of the subtree for each sample of X (post-order)"""
        if self.node_type == 'terminal':
            return X[:, self.feature].astype(np.float64)
        elif self.node_type == 'constant':
            return np.repeat(float(self.value), X.shape[0])
        args = [c.predict(X) for c in self.children]
        return np.broadcast_to(
            np.asarray(self.primitive(*args), dtype=np.float64),
            (X.shape[0],))
