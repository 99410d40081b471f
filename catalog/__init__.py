"""Book catalog core package.

Modules:
- books: versioned book store (compare-and-increment updates, paged listing)
- accounts: user store and bearer-token authentication resolver
- tokens: authentication token generation and revocation
- credentials: bcrypt password hashing
- pagination: cursor filters and result metadata
- database: SQLite engine and session management
- config: INI parsing and config object
"""

__version__ = "1.0.0"
