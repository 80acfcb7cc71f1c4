# setup.py
from setuptools import setup, find_packages

setup(
    name="geiser-stklos",
    version="0.1.0",
    description="Geiser protocol support for a STklos-flavoured Scheme runtime",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pygls>=1.1,<2",
        "lsprotocol",
    ],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    entry_points={
        "console_scripts": [
            "geiser-stklos-repl=geiser_stklos_lsp.repl_server:main",
            "geiser-stklos-ls=geiser_stklos_lsp.server:main",
        ],
    },
    zip_safe=False,
)
