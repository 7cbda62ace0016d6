from setuptools import setup,find_packages

DESCRIPTION = "Python package to cluster the voxels of dynamic images according to their Time-Activity Curves (TACs)"

with open('README.md', encoding='utf-8') as f:
    LONG_DESCRIPTION = f.read()

VERSION = "1.0"

base_packages = [
    "numpy>=1.16.0",
    "pandas",
    "scipy>=1.8",
    "scikit-learn",
    "nilearn",
    ]

test_packages = [
    "pytest",
    ]

setup(
    name="pytaclust",
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type='text/markdown',
    license="MIT",
    packages=find_packages(exclude=["tests","tests.*"]),
    install_requires=base_packages,
    extras_require={"test": test_packages},
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering",
        ],
    zip_safe=False,
    )
