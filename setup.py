from setuptools import setup
from pathlib import Path

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name = 'machoman',
    version = "1.0.0",
    description = 'Mach-O header and load command decoder',
    long_description = long_description,
    long_description_content_type = 'text/markdown',
    python_requires = '>=3.6',
    author = 'cynder',
    license = 'MIT',
    install_requires = [
        'Pygments'
    ],
    extras_require = {
        'test': ['pytest']
    },
    packages = ['machoman'],
    package_dir = {
        'machoman': 'src/machoman'
    },
    classifiers = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent'
    ],
    entry_points = {'console_scripts': [
        'machoman-dump=machoman.dump:main'
    ]}
)
