import os.path

from setuptools import find_packages, setup

from sqlalchemy_imagevariants.version import VERSION


def readme():
    try:
        with open(os.path.join(os.path.dirname(__file__), 'README.rst')) as f:
            return f.read()
    except (IOError, OSError):
        pass


install_requires = [
    'SQLAlchemy >= 1.4.0',
    'Wand >= 0.5.0',
    'python-magic >= 0.4.15'
]

tests_require = [
    'pytest >= 6.0.0'
]


setup(
    name='SQLAlchemy-ImageVariants',
    version=VERSION,
    description='Derive, store and record image variants of uploaded '
                'attachments',
    long_description=readme(),
    license='MIT License',
    packages=find_packages(exclude=['tests', 'tests.stores']),
    install_requires=install_requires,
    extras_require={'tests': tests_require},
    python_requires='>=3.7',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: Implementation :: CPython',
        'Topic :: Database :: Front-Ends',
        'Topic :: Multimedia :: Graphics'
    ]
)
