#!/usr/bin/env python

from setuptools import setup

setup(
    name='termgif',
    version='0.1.0',
    license='BSD 3-clause license',
    description='Play GIF animations in the terminal',
    long_description='A terminal GIF viewer written in Python which renders '
                     'animations with colored half block characters, from '
                     'local files or URLs.',
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: End Users/Desktop',
        'License :: OSI Approved :: BSD License',
        'Operating System :: MacOS',
        'Operating System :: POSIX :: BSD',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Multimedia :: Graphics :: Viewers',
        'Topic :: Terminals'
    ],
    python_requires='>=3.7',
    packages=[
        'termgif',
        'termgif.tests'
    ],
    scripts=['scripts/termgif'],
    include_package_data=True,
    install_requires=[
        'ansicolors',
        'Pillow>=9.1',
        'requests',
        'wcwidth',
    ],
    extras_require={
        'test': [
            'pyte',
        ],
        'dev': [
            'coverage',
            'pylint',
            'pyte',
            'twine',
            'wheel',
        ]
    }
)
