"""
Type-specific defaults for new scheme configurations.

``resolve_defaults`` is a pure merge: it fills the fields a configuration
leaves out (missing or None) from the kind profile and never validates.
"""

import copy
from typing import Any, Mapping

from app.scheme_engine.kinds import COMMON_DEFAULTS, get_profile
from app.scheme_engine.record import SchemeKind

_CURRENCY_FIELDS = ("currency", "target_currency")


def resolve_defaults(kind: SchemeKind | str, config: Mapping[str, Any]) -> dict:
    """
    Return a copy of *config* with per-kind defaults applied.

    Order: explicit values win over profile defaults, then forced
    values (e.g. ``supports_fx`` for FX schemes) override everything.
    Currency codes are upper-cased. *config* is not mutated.
    """
    profile = get_profile(kind)
    resolved = {k: copy.deepcopy(v) for k, v in config.items() if v is not None}
    resolved["kind"] = SchemeKind(kind).value

    for defaults in (profile.defaults, COMMON_DEFAULTS):
        for key, value in defaults.items():
            if key not in resolved:
                resolved[key] = copy.deepcopy(value)

    resolved.update(copy.deepcopy(profile.forced))

    for key in _CURRENCY_FIELDS:
        if resolved.get(key):
            resolved[key] = resolved[key].upper()
    for section in ("fees", "limits"):
        if resolved[section].get("currency"):
            resolved[section]["currency"] = resolved[section]["currency"].upper()

    return resolved
