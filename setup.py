#!/usr/bin/env python

from setuptools import setup

setup(name='rfc6265',
      version='1.0',
      description='Stand-alone RFC 6265 HTTP cookie parsing, matching, '
                  'and storage library',
      packages=['rfc6265'],
      python_requires='>=3.7',
      extras_require={'test': ['pytest']})
