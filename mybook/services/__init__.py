"""
Services Package

Business logic lives here, independent of HTTP. Routers call these
functions and services raise mybook.exceptions errors that the app
turns into JSON responses.

Modules:
- favorites: ranked favorite books (add / remove / move / list)
- collections: read-book collection, cascading review removal
- reviews: one review per user per book, author-only changes
- catalog: Google Books client with Redis caching
- users: account lookups, social discovery, admin listings
- stats: reading statistics
- security: password hashing and JWT tokens
- email: verification email over SMTP
- avatars: avatar upload validation and storage
- cache: Redis helpers
- rate_limiter: slowapi limiter
"""
