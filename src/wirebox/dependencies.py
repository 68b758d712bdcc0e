from __future__ import annotations

import inspect
import itertools
from collections.abc import Callable
from dataclasses import dataclass
from inspect import Parameter
from typing import Annotated, Any, get_args, get_origin, get_type_hints

from wirebox.exceptions import WireboxDependencyExtractionError, WireboxInvalidRegistrationError
from wirebox.service_key import ServiceKey

_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}
_SKIPPED_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
_POSITIONAL_KINDS = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True, slots=True)
class ParameterInfo:
    """A formal constructor parameter the container may have to supply."""

    name: str
    position: int | None
    """0-based index among positional parameters; ``None`` for keyword-only ones."""
    annotation: Any = Parameter.empty
    default: Any = Parameter.empty
    kind: Any = Parameter.POSITIONAL_OR_KEYWORD

    @property
    def has_default(self) -> bool:
        return self.default is not Parameter.empty

    @property
    def is_annotated(self) -> bool:
        return self.annotation is not Parameter.empty

    @property
    def declared_type(self) -> Any:
        """The annotation with any ``Annotated`` metadata stripped."""
        if get_origin(self.annotation) is Annotated:
            return get_args(self.annotation)[0]
        return self.annotation

    @property
    def service_key(self) -> ServiceKey | None:
        """Key used to resolve the parameter from the registry, if annotated."""
        if not self.is_annotated:
            return None
        return ServiceKey.from_value(self.annotation)

    def describe_annotation(self) -> str:
        if not self.is_annotated:
            return "no annotation"
        return getattr(self.declared_type, "__qualname__", None) or repr(self.declared_type)


@dataclass(frozen=True, slots=True)
class ConstructorRecipe:
    """Ordered parameters of a constructor plus the callable that builds the instance."""

    target: Callable[..., Any]
    parameters: tuple[ParameterInfo, ...]

    def construct(self, arguments: dict[str, Any]) -> Any:
        """Invoke the target with the supplied argument values.

        Parameters missing from ``arguments`` are left to their defaults.
        """
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in self.parameters:
            if parameter.name not in arguments:
                continue
            if parameter.kind is Parameter.POSITIONAL_ONLY:
                args.append(arguments[parameter.name])
            else:
                kwargs[parameter.name] = arguments[parameter.name]
        return self.target(*args, **kwargs)

    def get(self, name: str) -> ParameterInfo | None:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None


class DependenciesExtractor:
    """Extract constructor recipes from classes and factory callables."""

    def __init__(self) -> None:
        # Cache for extraction results
        self._recipes_cache: dict[Any, ConstructorRecipe] = {}

    def extract_from_type(self, concrete_type: type[Any]) -> ConstructorRecipe:
        """Build a recipe that instantiates ``concrete_type`` through its ``__init__``."""
        cached = self._recipes_cache.get(concrete_type)
        if cached is not None:
            return cached

        recipe = ConstructorRecipe(
            target=concrete_type,
            parameters=self._extract_parameters(
                provider=concrete_type.__init__,
                service_key=ServiceKey.from_value(concrete_type),
                skip_first_parameter=True,
            ),
        )
        self._recipes_cache[concrete_type] = recipe
        return recipe

    def extract_from_factory(self, factory: Callable[..., Any]) -> ConstructorRecipe:
        """Build a recipe that calls ``factory`` with its resolved parameters.

        Bound methods and classmethods are already bound, so no implicit first
        parameter is skipped.
        """
        cached = self._recipes_cache.get(factory)
        if cached is not None:
            return cached

        recipe = ConstructorRecipe(
            target=factory,
            parameters=self._extract_parameters(
                provider=factory,
                service_key=ServiceKey.from_value(factory),
                skip_first_parameter=False,
            ),
        )
        self._recipes_cache[factory] = recipe
        return recipe

    def extract_return_type(self, factory: Callable[..., Any]) -> Any | None:
        """Return the annotated return type of a factory, or ``None`` if absent."""
        try:
            hints = get_type_hints(factory, include_extras=True)
        except (AttributeError, NameError, TypeError):
            hints = {}
        return_type = hints.get("return")
        if return_type is not None:
            return return_type

        try:
            raw = inspect.signature(factory).return_annotation
        except (TypeError, ValueError):
            return None
        if raw is inspect.Signature.empty or isinstance(raw, str):
            return None
        return raw

    def _extract_parameters(
        self,
        *,
        provider: Callable[..., Any],
        service_key: ServiceKey,
        skip_first_parameter: bool,
    ) -> tuple[ParameterInfo, ...]:
        try:
            signature = inspect.signature(provider)
        except (TypeError, ValueError) as e:
            msg = f"Cannot inspect the signature of {service_key}: {e}"
            raise WireboxInvalidRegistrationError(msg) from e

        parameters = list(signature.parameters.values())
        if (
            skip_first_parameter
            and parameters
            and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES
        ):
            parameters = parameters[1:]

        try:
            hints = get_type_hints(provider, include_extras=True)
        except (AttributeError, NameError, TypeError) as e:
            hints = {}
            hint_error: Exception | None = e
        else:
            hint_error = None

        result: list[ParameterInfo] = []
        positions = itertools.count()
        for parameter in parameters:
            if parameter.kind in _SKIPPED_KINDS:
                continue
            position = next(positions) if parameter.kind in _POSITIONAL_KINDS else None

            annotation = hints.get(parameter.name, parameter.annotation)
            if isinstance(annotation, str):
                # Unresolvable forward reference
                raise WireboxDependencyExtractionError(
                    service_key,
                    hint_error or NameError(annotation),
                )

            result.append(
                ParameterInfo(
                    name=parameter.name,
                    position=position,
                    annotation=annotation,
                    default=parameter.default,
                    kind=parameter.kind,
                ),
            )
        return tuple(result)
