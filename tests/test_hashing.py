"""Unit tests for commenter identity hashing."""

import hashlib

from comment_notify.domain.models import Comment
from comment_notify.utils.hashing import mail_md5, mail_sha256, md5_hex, sha256_hex


class TestDigests:
    """Tests for md5_hex and sha256_hex."""

    def test_md5_hex(self):
        """Test MD5 digest of a UTF-8 string."""
        assert md5_hex("bob@example.com") == hashlib.md5(b"bob@example.com").hexdigest()
        assert len(md5_hex("x")) == 32

    def test_sha256_hex(self):
        """Test SHA-256 digest of a UTF-8 string."""
        assert sha256_hex("bob@example.com") == hashlib.sha256(b"bob@example.com").hexdigest()
        assert len(sha256_hex("x")) == 64

    def test_non_ascii_input(self):
        """Test that non-ASCII input is hashed as UTF-8."""
        assert md5_hex("小明") == hashlib.md5("小明".encode("utf-8")).hexdigest()


class TestMailMd5:
    """Tests for mail_md5."""

    def test_prefers_stored_hash(self):
        """Test that a stored mailMd5 is used verbatim."""
        comment = Comment.model_validate({"mailMd5": "precomputed", "mail": "bob@example.com"})

        assert mail_md5(comment) == "precomputed"

    def test_hashes_normalized_mail(self):
        """Test that the email is trimmed and lower-cased before hashing."""
        comment = Comment(mail="  Bob@Example.COM ")

        assert mail_md5(comment) == md5_hex("bob@example.com")

    def test_falls_back_to_nick(self):
        """Test that commenters without email are hashed by nickname."""
        assert mail_md5(Comment(nick="Bob")) == md5_hex("Bob")

    def test_empty_comment(self):
        """Test that an anonymous commenter still gets a stable hash."""
        assert mail_md5(Comment()) == md5_hex("")


class TestMailSha256:
    """Tests for mail_sha256."""

    def test_hashes_normalized_mail(self):
        """Test that the email is normalized before hashing."""
        assert mail_sha256(Comment(mail="BOB@example.com")) == sha256_hex("bob@example.com")

    def test_ignores_stored_md5(self):
        """Test that the stored MD5 is not reused for SHA-256 CDNs."""
        comment = Comment.model_validate({"mailMd5": "precomputed", "mail": "bob@example.com"})

        assert mail_sha256(comment) == sha256_hex("bob@example.com")

    def test_falls_back_to_nick(self):
        """Test that commenters without email are hashed by nickname."""
        assert mail_sha256(Comment(nick="Bob")) == sha256_hex("Bob")
