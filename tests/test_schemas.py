"""Unit tests for request schemas: password strength, markup stripping and search filters."""

import unittest

from pydantic import ValidationError

from rolegate.schemas import ChangePasswordRequest, UserCreate, UserSearch, UserUpdate


def _create(**kwargs: object) -> UserCreate:
    data = {
        "email": "ada@example.com",
        "password": "Secret123",
        "first_name": "Ada",
        "last_name": "Lovelace",
    }
    data.update(kwargs)
    return UserCreate(**data)


class TestUserCreate(unittest.TestCase):
    def test_valid_payload(self) -> None:
        user = _create(email="  ADA@Example.com ")
        self.assertEqual(user.email, "ada@example.com")
        self.assertIsNone(user.role_id)

    def test_password_rules(self) -> None:
        for password in ("Short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere", "A1" + "a" * 31):
            with self.subTest(password=password):
                with self.assertRaises(ValidationError):
                    _create(password=password)

    def test_markup_is_stripped_from_names(self) -> None:
        user = _create(first_name="<b>Ada</b>")
        self.assertEqual(user.first_name, "Ada")

    def test_name_length(self) -> None:
        with self.assertRaises(ValidationError):
            _create(first_name="A")
        with self.assertRaises(ValidationError):
            _create(last_name="x" * 51)

    def test_invalid_email_and_role(self) -> None:
        with self.assertRaises(ValidationError):
            _create(email="not-an-email")
        with self.assertRaises(ValidationError):
            _create(role_id=4)


class TestUserUpdate(unittest.TestCase):
    def test_partial_dump_contains_only_sent_fields(self) -> None:
        update = UserUpdate(first_name="Grace")
        self.assertEqual(update.model_dump(exclude_unset=True), {"first_name": "Grace"})


class TestUserSearch(unittest.TestCase):
    def test_defaults(self) -> None:
        search = UserSearch()
        self.assertEqual((search.page, search.limit), (1, 10))
        self.assertIsNone(search.role_ids())

    def test_role_id_single_or_list(self) -> None:
        self.assertEqual(UserSearch(role_id=2).role_ids(), [2])
        self.assertEqual(UserSearch(role_id=[2, 3]).role_ids(), [2, 3])

    def test_name_letters_only(self) -> None:
        self.assertEqual(UserSearch(name="Ada Love").name, "Ada Love")
        with self.assertRaises(ValidationError):
            UserSearch(name="ada%")

    def test_limit_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            UserSearch(limit=0)
        with self.assertRaises(ValidationError):
            UserSearch(page=0)


class TestChangePassword(unittest.TestCase):
    def test_new_password_is_checked(self) -> None:
        with self.assertRaises(ValidationError):
            ChangePasswordRequest(current_password="whatever", new_password="weak")
        ok = ChangePasswordRequest(current_password="whatever", new_password="Strong123")
        self.assertEqual(ok.new_password, "Strong123")


if __name__ == "__main__":
    unittest.main()
