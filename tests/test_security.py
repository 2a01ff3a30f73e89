"""Unit tests for password hashing and token helpers."""

from valkyrie.utils.security import (generate_token, get_password_hash,
                                     gravatar_url, verify_password)


class TestPasswordHashing:
    def test_hash_is_not_the_password_and_verifies(self):
        hashed = get_password_hash("password")

        assert hashed != "password"
        assert hashed.startswith("$2")
        assert verify_password("password", hashed)
        assert not verify_password("Password", hashed)

    def test_hashes_are_salted(self):
        assert get_password_hash("password") != get_password_hash("password")

    def test_long_passwords_are_cut_at_72_bytes(self):
        base = "a" * 72
        hashed = get_password_hash(base + "tail")

        assert verify_password(base, hashed)
        assert verify_password(base + "other tail", hashed)

    def test_multibyte_passwords_are_cut_on_a_character_boundary(self):
        password = "비" * 30  # 90 bytes in UTF-8
        hashed = get_password_hash(password)

        assert verify_password(password, hashed)
        assert verify_password("비" * 24, hashed)

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("password", "not-a-bcrypt-hash") is False


def test_generate_token_is_random_and_url_safe():
    tokens = {generate_token() for _ in range(50)}

    assert len(tokens) == 50
    for token in tokens:
        assert len(token) >= 40
        assert all(c.isalnum() or c in "-_" for c in token)


def test_gravatar_url_uses_normalized_email():
    url = gravatar_url("  Valkyrie@Example.com ")

    assert url == gravatar_url("valkyrie@example.com")
    assert url.startswith("https://gravatar.com/avatar/")
    assert url.endswith("?d=identicon")
