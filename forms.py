# Request body validation
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool, ValidationError

from errors import BadRequestError


class _Form(BaseModel):
    model_config = ConfigDict(extra='forbid')


class UserAuthForm(_Form):
    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=1, max_length=50)


class UserRegisterForm(_Form):
    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=5, max_length=50)
    displayName: str = Field(min_length=1, max_length=50)
    email: EmailStr


class UserNewForm(UserRegisterForm):
    isAdmin: StrictBool = False


class UserUpdateForm(_Form):
    password: Optional[str] = Field(default=None, min_length=5, max_length=50)
    displayName: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    isAdmin: Optional[StrictBool] = None


class PostNewForm(_Form):
    content: str = Field(min_length=1, max_length=5000)


def _describe(error):
    location = '.'.join(str(part) for part in error['loc'])
    return f"{location}: {error['msg']}" if location else error['msg']


def validate_form(form, data):
    """Validate `data` against `form` and return only the fields that were sent.

    Raises BadRequestError with one message per problem.
    """
    if not isinstance(data, dict):
        raise BadRequestError(["Request body must be a JSON object"])
    try:
        parsed = form.model_validate(data)
    except ValidationError as e:
        raise BadRequestError([_describe(err) for err in e.errors()])
    return parsed.model_dump(exclude_unset=True, exclude_none=True)
