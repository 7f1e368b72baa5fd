"""

Install the taxonkv package.

"""

from setuptools import setup

setup(
    name="taxonkv",
    version="0.0",
    description="A tool for indexing taxonomic name matches into a key-value store.",
    keywords="taxonomy gbif",
    packages=["taxonkv", "taxonkv.apis", "taxonkv.db", "taxonkv.species"],
    python_requires=">=3.11",
    install_requires=["httpx", "unidecode"],
    extras_require={"test": ["mypy", "flake8", "pytest"]},
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.11",
    ],
)
