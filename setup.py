# -*- coding: utf-8 -*-
from setuptools import setup, find_packages


DISTNAME = "scikit-admixstats"

PACKAGE_NAME = "admixstats"

DESCRIPTION = (
    "Population differentiation, admixture tests, PCA and ancestry "
    "projection for genotype data."
)

LICENSE = "MIT"

INSTALL_REQUIRES = ["numpy", "scipy", "pandas"]

EXTRAS_REQUIRE = {
    "test": [
        "pytest",
    ]
}

CLASSIFIERS = [
    "Development Status :: 4 - Beta",
    "License :: OSI Approved :: MIT License",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
    "Operating System :: Microsoft :: Windows",
    "Operating System :: POSIX",
    "Operating System :: Unix",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
]


def get_version():
    metadata = dict()
    with open("%s/version.py" % PACKAGE_NAME) as f:
        exec(f.read(), metadata)
    return metadata["__version__"]


def setup_package():
    metadata = dict(
        name=DISTNAME,
        version=get_version(),
        description=DESCRIPTION,
        license=LICENSE,
        package_dir={"": "."},
        packages=find_packages(include=[PACKAGE_NAME, PACKAGE_NAME + ".*"]),
        classifiers=CLASSIFIERS,
        python_requires=">=3.9",
        install_requires=INSTALL_REQUIRES,
        extras_require=EXTRAS_REQUIRE,
        zip_safe=False,
    )
    setup(**metadata)


if __name__ == "__main__":
    setup_package()
