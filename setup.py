from setuptools import setup, find_packages


install_requires = [
    'PyYAML>=3.0',
    'pyproj>=2',
    'jsonschema>=4',
]

extras_require = {
    'test': [
        'pytest',
    ],
}


def long_description(changelog_releases=10):
    import re

    readme = open('README.md').read()
    changes = ['\nChanges\n-------\n']
    version_line_re = re.compile(r'^\d\.\d+\.\d+\S*\s20\d\d-\d\d-\d\d')
    for line in open('CHANGES.txt'):
        if version_line_re.match(line):
            if changelog_releases == 0:
                break
            changelog_releases -= 1
        changes.append(line)
    return readme + ''.join(changes)


setup(
    name='wmtsource',
    version="0.3.0",
    description='Tile URLs and tile source options for WMTS services',
    long_description=long_description(7),
    long_description_content_type='text/markdown',
    author='The wmtsource authors',
    license='Apache Software License 2.0',
    packages=find_packages(include=['wmtsource', 'wmtsource.*']),
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'wmtsource-util = wmtsource.script.util:main',
        ],
    },
    package_data={'': ['*.json']},
    install_requires=install_requires,
    python_requires='>=3.9',
    extras_require=extras_require,
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    zip_safe=False
)
