"""
Request authorization policy.

The policy is an ordered list of AccessRule values evaluated first-match-wins,
so rules go from most specific to most generic. Keeping it as plain data
lets tests inspect the order directly (see find_shadowed_rules).

Patterns are Ant-style:
    /auth/**        /auth and everything below it
    /users/*        exactly one segment below /users
    /openapi.json   literal path
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Iterable, Optional, Sequence

from auth.errors import ForbiddenError, UnauthorizedError
from models.user import User

API_V1 = "/api/v1"

ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"


class AccessLevel(str, Enum):
    """Access requirement, most to least permissive"""
    PUBLIC = "public"
    DEV_ONLY = "dev_only"  # PUBLIC, but only installed in development
    ROLE = "role"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AccessRule:
    name: str
    patterns: tuple[str, ...]
    level: AccessLevel
    role: Optional[str] = None

    def matches(self, path: str) -> bool:
        return any(match_path(pattern, path) for pattern in self.patterns)


@dataclass(frozen=True)
class Principal:
    """An authenticated caller and the roles it holds"""
    user: User
    roles: frozenset[str] = field(default_factory=lambda: frozenset({ROLE_USER}))

    def has_role(self, role: str) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class Decision:
    allowed: bool
    rule: AccessRule
    # "unauthenticated" or "forbidden" when allowed is False
    reason: Optional[str] = None


def _versioned(*paths: str) -> tuple[str, ...]:
    """Each path at the root and under /api/v1"""
    return tuple(paths) + tuple(API_V1 + path for path in paths)


PUBLIC_RULE = AccessRule(
    name="public",
    patterns=_versioned("/auth/**") + (
        "/oauth2/**",        # OAuth2 authorization start
        "/login/oauth2/**",  # OAuth2 provider callback
        "/error",
        "/health",
    ),
    level=AccessLevel.PUBLIC,
)

DEV_RULE = AccessRule(
    name="dev",
    patterns=("/docs/**", "/redoc/**", "/openapi.json"),
    level=AccessLevel.DEV_ONLY,
)

ADMIN_RULE = AccessRule(
    name="admin",
    patterns=_versioned("/admin/**"),
    level=AccessLevel.ROLE,
    role=ROLE_ADMIN,
)

AUTHENTICATED_RULE = AccessRule(
    name="authenticated",
    patterns=_versioned("/users/**", "/profile/**"),
    level=AccessLevel.AUTHENTICATED,
)

ANY_REQUEST_RULE = AccessRule(
    name="any_request",
    patterns=("/**",),
    level=AccessLevel.AUTHENTICATED,
)


def build_policy(development: bool) -> list[AccessRule]:
    """
    Build the ordered rule list.

    The DEV_ONLY rule is left out entirely outside development, so those
    paths fall through to the catch-all and require authentication.
    """
    rules = [PUBLIC_RULE]
    if development:
        rules.append(DEV_RULE)
    rules.extend([ADMIN_RULE, AUTHENTICATED_RULE, ANY_REQUEST_RULE])
    return rules


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern:
    parts = []
    for segment in pattern.strip("/").split("/"):
        if segment == "**":
            parts.append("(?:/[^/]+)*")
        else:
            parts.append("/" + re.escape(segment).replace(r"\*", "[^/]*"))
    return re.compile("^" + "".join(parts) + "/?$")


def match_path(pattern: str, path: str) -> bool:
    return compile_pattern(pattern).match(path or "/") is not None


def evaluate(rules: Sequence[AccessRule], path: str, principal: Optional[Principal]) -> Decision:
    """
    Decide whether principal may access path. First matching rule wins;
    a path no rule matches requires authentication.
    """
    rule = next((r for r in rules if r.matches(path)), ANY_REQUEST_RULE)

    if rule.level in (AccessLevel.PUBLIC, AccessLevel.DEV_ONLY):
        return Decision(allowed=True, rule=rule)
    if principal is None:
        return Decision(allowed=False, rule=rule, reason="unauthenticated")
    if rule.level is AccessLevel.ROLE and not principal.has_role(rule.role or ""):
        return Decision(allowed=False, rule=rule, reason="forbidden")
    return Decision(allowed=True, rule=rule)


def authorize(rules: Sequence[AccessRule], path: str, principal: Optional[Principal]) -> AccessRule:
    """
    Evaluate and raise on denial.

    Raises:
        UnauthorizedError: the rule needs a principal and there is none
        ForbiddenError: the principal lacks the rule's role
    """
    decision = evaluate(rules, path, principal)
    if decision.reason == "unauthenticated":
        raise UnauthorizedError()
    if decision.reason == "forbidden":
        raise ForbiddenError()
    return decision.rule


def pattern_covers(general: str, specific: str) -> bool:
    """
    True if every path matched by specific is also matched by general.

    Conservative: only literal equality, literal paths, and "/**" prefixes
    are recognised.
    """
    if general == specific:
        return True
    if "*" not in specific:
        return match_path(general, specific)
    if general.endswith("/**"):
        prefix = general[:-3]
        return specific == prefix or specific.startswith(prefix + "/")
    return False


def _same_requirement(a: AccessRule, b: AccessRule) -> bool:
    return a.level == b.level and a.role == b.role


def find_shadowed_rules(rules: Iterable[AccessRule]) -> list[tuple[AccessRule, AccessRule, str]]:
    """
    List (earlier, later, pattern) triples where an earlier rule already
    captures every path of one of a later rule's patterns with a different
    requirement, making that later pattern dead.
    """
    rules = list(rules)
    shadowed = []
    for i, earlier in enumerate(rules):
        for later in rules[i + 1:]:
            if _same_requirement(earlier, later):
                continue
            for pattern in later.patterns:
                if any(pattern_covers(g, pattern) for g in earlier.patterns):
                    shadowed.append((earlier, later, pattern))
    return shadowed
