"""Helpers for BigML resource ids of the form ``<type>/<id>``."""

from bigml_parallel.resource.domain.errors import WrongResourceTypeError


def resource_type(resource_id: str) -> str:
    """Return the type prefix of ``resource_id``, e.g. ``"execution"``."""
    prefix, sep, rest = resource_id.partition("/")
    if not sep or not prefix or not rest:
        raise WrongResourceTypeError(expected="<type>/", found=resource_id)
    return prefix


def check_resource_id(resource_id: str, expected_type: str) -> str:
    """Return ``resource_id`` unchanged if it names a resource of ``expected_type``.

    Raises:
        WrongResourceTypeError: if the id is malformed or of another type.
    """
    expected = f"{expected_type}/"
    if not resource_id.startswith(expected) or len(resource_id) == len(expected):
        raise WrongResourceTypeError(expected=expected, found=resource_id)
    return resource_id
