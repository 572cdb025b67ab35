"""Public error messages and the pt/en tables."""

from types import SimpleNamespace

from agrox.errors import AppError, public_error_message
from agrox.i18n import normalize_language, translate, TRANSLATIONS


def test_normalize_language():
    assert normalize_language("pt-PT") == "pt"
    assert normalize_language("pt_BR") == "pt"
    assert normalize_language("en-US") == "en"
    assert normalize_language("fr") == "pt"
    assert normalize_language(None) == "pt"


def test_translate_falls_back():
    assert translate("login", "en") == TRANSLATIONS["en"]["login"]
    assert translate("login", "de") == TRANSLATIONS["pt"]["login"]
    assert translate("no.such.key", "en") == "no.such.key"


def test_tables_have_same_keys():
    assert set(TRANSLATIONS["pt"]) == set(TRANSLATIONS["en"])


def test_known_codes():
    assert public_error_message(AppError("not_authorized"), "en") == translate("notAuthorized", "en")
    assert public_error_message(AppError("invalid_email"), "pt") == translate("invalidEmail", "pt")
    assert public_error_message(AppError("cannot_change_self"), "en") == translate("cannotChangeSelf", "en")


def test_postgres_permission_code():
    err = SimpleNamespace(message="permission denied for table user_roles", code="42501")
    assert public_error_message(err, "en") == translate("notAuthorized", "en")


def test_internal_details_never_leak():
    err = Exception('relation "user_compliance" does not exist')
    msg = public_error_message(err, "en")
    assert msg == translate("genericError", "en")
    assert "user_compliance" not in msg


def test_user_not_found_is_generic():
    assert public_error_message(AppError("user_not_found"), "pt") == translate("genericError", "pt")


def test_empty_error():
    assert public_error_message(None, "en") == translate("genericError", "en")
