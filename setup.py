"""Install the IDAM service."""

from setuptools import setup, find_packages

setup(
    name='idam',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    py_modules=['wsgi'],
    install_requires=[
        "flask",
        "flask-sqlalchemy",
        "sqlalchemy",
        "werkzeug",
        "click",
        "redis",
        "pytz",
        "python-dateutil",
        "requests",
        "retry",
        "python-json-logger",
        "bcrypt",
        "ldap3",
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
            "fakeredis",
        ],
    },
    zip_safe=False
)
