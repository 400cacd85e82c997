"""Shared secrets and DSNs for the test suite."""

TEST_JWT_SECRET = "test-signing-key-with-enough-entropy-0123456789"
TEST_PRIVATE_KEY = "private_test_key_for_upload_signatures"
MEMORY_DSN = "sqlite+aiosqlite:///:memory:"
