from setuptools import setup
setup(
  name = 'quiz_core',
  packages = [
    'quiz_core',
    ],
  py_modules = [
    'quiz_server',
    ],
  package_data = {
    'quiz_core': ['queries.sql'],
    },
  version = '0.1',
  license='',
  description = 'Interactive quiz manager over a line oriented socket interface',
  author = '',
  author_email = '',
  url = '',
  download_url = '',
  keywords = ['quiz', 'trivia'],
  install_requires=[
          'tabulate      >= 0.8.7',
      ],
  classifiers=[
    'Development Status :: 4 - Beta',
    'Intended Audience :: Developers',
    'Programming Language :: Python :: >3.6',
  ],
)
