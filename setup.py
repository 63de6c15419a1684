from setuptools import setup, find_packages
from sampy.__version import __version__

with open('README.md') as readme:
    setup(
        name='sampy',
        version=__version__,
        packages=find_packages(exclude=('tests', 'tests.*')),
        long_description=readme.read(),
        long_description_content_type='text/markdown',
        license='MIT',
        description='Python parser and serializer for the SAM (Sequence Alignment/Map) text format',
        python_requires='>=3.6',
        include_package_data=True
    )
