"""Authorization policies — the tagged variant attached to every route.

Declarations carry at most one annotation per level:

- ``Public()`` on an endpoint: no credential needed, nothing inspected.
- ``EndpointPolicy(validators, require_all)`` on an endpoint.
- ``ControllerPolicy(validators, require_all)`` on a controller, inherited
  by every endpoint that declares neither of the above.
- ``Unspecified`` when nothing applies.

``resolve_policy`` collapses the levels into the single policy a route
enforces. It runs once per route when the table is built; requests only
ever see the resolved value. Precedence is strict:
``Public > EndpointPolicy > ControllerPolicy > Unspecified``, and an
endpoint policy *replaces* the controller chain rather than merging with it.
"""

from dataclasses import dataclass

from finch.auth.validators import Validator


@dataclass(frozen=True, slots=True)
class Public:
    """Endpoint is reachable without a credential."""

    @property
    def label(self) -> str:
        return "public"


@dataclass(frozen=True, slots=True)
class _ChainPolicy:
    """A validator chain with its combinator.

    ``require_all=True`` is AND (every validator must pass, stop at the
    first failure); ``False`` is OR (stop at the first success).
    """

    validators: tuple[Validator, ...] = ()
    require_all: bool = True

    def __post_init__(self) -> None:
        # Accept any iterable; store an immutable tuple.
        object.__setattr__(self, "validators", tuple(self.validators))

    @property
    def combinator(self) -> str:
        return "AND" if self.require_all else "OR"


@dataclass(frozen=True, slots=True)
class ControllerPolicy(_ChainPolicy):
    """Chain inherited by every endpoint of a controller."""

    @property
    def label(self) -> str:
        return f"controller[{self.combinator}:{len(self.validators)}]"


@dataclass(frozen=True, slots=True)
class EndpointPolicy(_ChainPolicy):
    """Chain for one endpoint; replaces any controller chain."""

    @property
    def label(self) -> str:
        return f"endpoint[{self.combinator}:{len(self.validators)}]"


@dataclass(frozen=True, slots=True)
class Unspecified:
    """No policy declared at any level.

    ``deny=False`` requires an authenticated caller and nothing more;
    ``deny=True`` rejects every caller. Chosen by
    ``EngineConfig.unspecified_policy`` at build time.
    """

    deny: bool = False

    @property
    def label(self) -> str:
        return "unspecified:deny" if self.deny else "unspecified:authenticated"


type AuthPolicy = Public | ControllerPolicy | EndpointPolicy | Unspecified
type EndpointAuth = Public | EndpointPolicy | None


def resolve_policy(
    endpoint: EndpointAuth,
    controller: ControllerPolicy | None,
    *,
    deny_unspecified: bool = False,
) -> AuthPolicy:
    """Collapse endpoint and controller annotations into one policy."""
    if isinstance(endpoint, Public):
        return endpoint
    if isinstance(endpoint, EndpointPolicy):
        return endpoint
    if controller is not None:
        return controller
    return Unspecified(deny=deny_unspecified)
