"""Contract tests — verify all public symbols are importable from top-level."""

from __future__ import annotations

import meadowlark

PUBLIC_SYMBOLS = [
    # Core
    "build_app",
    "start_server",
    "Settings",
    "get_settings",
    "RequestContext",
    "get_context",
    # Chain
    "Chain",
    "ResolvedChain",
    "ChainStep",
    "StepCategory",
    "ChainMiddleware",
    # Fault isolation
    "FaultIsolation",
    "spawn",
    # Gates
    "AccessPolicy",
    "AllowRoles",
    "CustomerOnly",
    "EmployeeOnly",
    "gate",
    "allow",
    "customer_only",
    "employee_only",
    # Views
    "AutoViewResolver",
    # Storage
    "DocumentStore",
    "InMemoryDocumentStore",
    "MongoDocumentStore",
    # Exceptions
    "PipelineException",
    "PipelineAbort",
    "Unauthorized",
    "RouteConcealed",
    "CSRFError",
    "ConfigurationError",
    "UnknownEnvironment",
    "MissingCredentials",
    "StoreError",
    "RecordNotFound",
]


class TestPublicAPIContract:
    def test_all_symbols_importable(self) -> None:
        for symbol in PUBLIC_SYMBOLS:
            assert hasattr(meadowlark, symbol), (
                f"Symbol '{symbol}' not found in meadowlark"
            )

    def test_all_symbols_in_all(self) -> None:
        for symbol in PUBLIC_SYMBOLS:
            assert symbol in meadowlark.__all__, f"Symbol '{symbol}' not in __all__"

    def test_chain_has_add_resolve(self) -> None:
        from meadowlark import Chain

        chain = Chain()
        assert hasattr(chain, "add")
        assert hasattr(chain, "resolve")

    def test_chain_step_is_abstract(self) -> None:
        import pytest

        from meadowlark import ChainStep

        with pytest.raises(TypeError):
            ChainStep()  # type: ignore[abstract]

    def test_request_context_is_dataclass(self) -> None:
        from dataclasses import fields

        from meadowlark import RequestContext

        field_names = [f.name for f in fields(RequestContext)]
        assert field_names == ["request", "user", "session", "locals", "state"]

    def test_gates_return_callables(self) -> None:
        from meadowlark import allow, customer_only, employee_only

        assert callable(allow("customer,employee"))
        assert callable(customer_only)
        assert callable(employee_only)

    def test_exception_hierarchy(self) -> None:
        from meadowlark import (
            ConfigurationError,
            CSRFError,
            MissingCredentials,
            PipelineAbort,
            PipelineException,
            RecordNotFound,
            RouteConcealed,
            StoreError,
            Unauthorized,
            UnknownEnvironment,
        )

        assert issubclass(PipelineAbort, PipelineException)
        assert issubclass(Unauthorized, PipelineAbort)
        assert issubclass(RouteConcealed, PipelineAbort)
        assert issubclass(CSRFError, PipelineAbort)
        assert issubclass(ConfigurationError, PipelineException)
        assert not issubclass(ConfigurationError, PipelineAbort)
        assert issubclass(UnknownEnvironment, ConfigurationError)
        assert issubclass(MissingCredentials, ConfigurationError)
        assert issubclass(RecordNotFound, StoreError)

    def test_step_category_has_eight_members(self) -> None:
        from meadowlark import StepCategory

        assert len(list(StepCategory)) == 8

    def test_resolved_chain_is_frozen(self) -> None:
        import dataclasses

        import pytest

        from meadowlark import Chain

        resolved = Chain().resolve()
        with pytest.raises(dataclasses.FrozenInstanceError):
            resolved.steps = ()  # type: ignore[misc]
