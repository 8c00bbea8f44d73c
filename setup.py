#!/usr/bin/env python
"""Setup script for txfrag.

Command-line scripts are detected automatically from the modules in
`txfrag/bin`, and registered as console entry points named after each module.
"""
import os
from setuptools import setup, find_packages

txfrag_version = "0.1.0"


#===============================================================================
# Package metadata
#===============================================================================

with open("README.rst") as f:
    long_description = f.read()

packages = find_packages(include=["txfrag", "txfrag.*"])

install_requires = [
    "numpy>=1.9.4",
    "scipy>=0.15.1",
    "pandas>=0.17.0",
    "matplotlib>=3.5.0",
    "biopython>=1.64",
    "pysam>=0.8.4",
    "twobitreader>=3.0.0",
    "termcolor",
]

tests_require = [
    "pytest",
]


def get_scripts():
    """Detect command-line scripts automatically

    Returns
    -------
    list
        list of strings describing command-line scripts
    """
    binscripts = [
        X.replace(".py", "") for X in filter(
            lambda x: x.endswith(".py") and "__init__" not in x,
            os.listdir(os.path.join("txfrag", "bin")),
        )
    ]
    return ["%s = txfrag.bin.%s:main" % (X, X) for X in binscripts]


#===============================================================================
# Program body
#===============================================================================

setup(

    name             = "txfrag",
    version          = txfrag_version,
    long_description = long_description,
    long_description_content_type = "text/x-rst",

    description      = "Compatibility and transcript-coordinate mapping of paired-end RNA-seq fragments",
    license          = "BSD 3-Clause",
    keywords         = "rna-seq paired-end fragments transcripts sequencing genomics biology",
    platforms        = "OS Independent",

    classifiers      = [
         'Development Status :: 3 - Alpha',
         'Programming Language :: Python :: 3',

         'Topic :: Scientific/Engineering :: Bio-Informatics',
         'Topic :: Software Development :: Libraries',

         'Intended Audience :: Science/Research',
         'Intended Audience :: Developers',

         'License :: OSI Approved :: BSD License',
         'Operating System :: POSIX',
         'Natural Language :: English',
    ],

    zip_safe = False,
    packages = packages,

    package_dir = {
        "txfrag"  : "txfrag",
    },

    entry_points = {
        "console_scripts" : get_scripts()
    },

    python_requires  = ">=3.8",
    install_requires = install_requires,
    extras_require   = {
        "test" : tests_require,
    },

) # yapf: disable
