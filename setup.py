import setuptools

setuptools.setup(
    name="decklist",
    version="0.3",
    author="yochi",
    author_email="pedrogush@gmail.com",
    description="MTG decklist checker: missing cards, format legality and prices against a collection",
    packages=["controllers", "services", "repositories", "utils"],
    py_modules=["main"],
    classifiers=["Programming Language :: Python :: 3", "Operating System :: OS Independent"],
    python_requires=">=3.11",
    install_requires=[
        "loguru",
        "curl_cffi",  # Scryfall bulk data downloads
        "pyperclip",  # Copying the missing list to the clipboard
        "tomli-w",  # Writing config.toml
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["decklist=main:main"]},
)
