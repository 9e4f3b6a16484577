"""Template rendering for notification titles and bodies."""

import re
from typing import Any, Dict, Iterable, Mapping, Union

from infrastructure.identity import PlatformUser
from modules.notifications.domain import TemplateVariable

PLACEHOLDER = re.compile(r"{{\s*(\w+)\s*}}")


def render(
    template: str,
    bindings: Mapping[str, Any],
    catalog: Iterable[Union[TemplateVariable, str]],
) -> str:
    """Substitute ``{{variable}}`` placeholders.

    Catalog variables are replaced by their binding; a missing or None
    binding renders as ``{variable}``. Placeholders naming variables outside
    the catalog are left untouched.

    >>> render("Hi {{name}}", {"name": "Ava"}, ["name"])
    'Hi Ava'
    >>> render("Hi {{name}}", {}, ["name"])
    'Hi {name}'
    """
    names = {v.variable if isinstance(v, TemplateVariable) else v for v in catalog}

    def substitute(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in names:
            return match.group(0)
        value = bindings.get(name)
        if value is None:
            return "{" + name + "}"
        return str(value)

    return PLACEHOLDER.sub(substitute, template)


def recipient_bindings(
    user: PlatformUser, context: Mapping[str, Any]
) -> Dict[str, Any]:
    """Bindings for one recipient: profile fields beneath the emitted context."""
    bindings: Dict[str, Any] = dict(user.attributes)
    bindings.update(
        {
            "userName": user.name,
            "userEmail": user.email,
            "userRole": user.role,
            "userId": user.id,
        }
    )
    bindings.update(context)
    return bindings
