"""Models for the account settings pages."""

from dataclasses import dataclass

from mashumaro.mixins.json import DataClassJSONMixin


@dataclass
class AccountUpdateDTO(DataClassJSONMixin):
    """Form submitted from the account settings page.

    Empty strings mean "leave unchanged".
    """

    email: str = ""
    username: str = ""
    displayname: str = ""
    old_password: str = ""
    new_password: str = ""
    password_confirmation: str = ""


@dataclass
class AccountProfileVO(DataClassJSONMixin):
    """Profile of the logged in user, returned to scripted clients."""

    id: int
    name: str
    photo: str
    status: str = "ok"
