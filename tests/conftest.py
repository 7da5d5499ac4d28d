import os

# Configuration is read at import time, so these must be set before any booking import.
os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('SESSION_SECRET_KEY', 'test-session-secret-key-0123456789abcdef')
