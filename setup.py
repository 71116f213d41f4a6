#!/usr/bin/env python
from setuptools import find_packages, setup

# Keep in sync with imagehub.VERSION
VERSION = "0.3.0"
INSTALL_REQUIREMENTS = [
    "boto3",
    "celery[redis]>=5.3",
    "Django>=4.2",
    "django-celery-beat",
    "django-storages[s3]",
    "psycopg2-binary",
    "requests",
    "sentry-sdk",
    "structlog",
]
TEST_REQUIREMENTS = ["pytest", "pytest-django"]
SCRIPTS = ["manage.py"]
DESCRIPTION = "Bulk import of folder images into object storage"
CLASSIFIERS = """\
Environment :: Web Environment
Framework :: Django
Framework :: Celery
Programming Language :: Python
Programming Language :: Python :: 3
""".splitlines()


setup(
    name="imagehub",
    version=VERSION,
    description=DESCRIPTION,
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    include_package_data=True,
    scripts=SCRIPTS,
    install_requires=INSTALL_REQUIREMENTS,
    extras_require={"test": TEST_REQUIREMENTS},
    python_requires=">=3.10",
    classifiers=CLASSIFIERS,
)
