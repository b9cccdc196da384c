import numpy as np
from sklearn.utils import check_array, check_X_y


class Dataset:
    """A numeric sample matrix whose last column is the expected output

    Objectives and factories receive a Dataset by reference; replacing the
    dataset of an objective marks its cached expected outputs as stale.
    """

    def __init__(self, samples, labels=None):
        self.samples = check_array(samples, dtype=np.float64)
        if self.samples.shape[1] < 2:
            raise ValueError('A dataset needs at least one feature column and '
                             'an expected output column')
        if labels is None:
            labels = [f'f{i}' for i in range(self.num_features)]
        elif len(labels) != self.num_features:
            raise ValueError(f'Expected {self.num_features} feature labels, '
                             f'got {len(labels)}')
        self.labels = list(labels)

    @classmethod
    def from_X_y(cls, X, y, labels=None):
        """Return a Dataset from a feature matrix and a target vector"""
        X, y = check_X_y(X, y, y_numeric=True)
        return cls(np.column_stack([X, y]), labels)

    def __repr__(self):
        return (f'<Dataset: {len(self)} samples, '
                f'{self.num_features} features>')

    def __len__(self):
        return self.samples.shape[0]

    @property
    def num_features(self):
        return self.samples.shape[1] - 1

    @property
    def X(self):
        return self.samples[:, :-1]

    @property
    def y(self):
        return self.samples[:, -1]
