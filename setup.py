import re
import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("iconic_gp/__init__.py", "r") as fh:
    __version__ = re.search(r'__version__ = "(.+)"', fh.read()).group(1)

setuptools.setup(
    name="iconic_gp",
    version=__version__,
    author="Iconic",
    description="Multi-objective symbolic regression with Cartesian and "
                "Gene Expression Programming",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=["iconic_gp"],
    install_requires=[
        'numpy',
        'scikit-learn',
        'sympy',
        'cachetools',
    ],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
    ],
    python_requires='>=3.7',
)
