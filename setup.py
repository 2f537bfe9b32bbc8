from setuptools import setup, find_packages

setup(
    name="catalog-bulk-upload",
    version="0.1.0",
    packages=find_packages(include=["src", "src.*"]),
    install_requires=[
        "flask",
        "werkzeug",
        "openpyxl",
        "xlrd",
        "prometheus_client",
        "python-json-logger",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
)
