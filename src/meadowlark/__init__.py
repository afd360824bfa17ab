"""Meadowlark Travel - server-rendered vacation storefront on FastAPI."""

from meadowlark.app import build_app
from meadowlark.autoview import AutoViewResolver
from meadowlark.chain import Chain, ResolvedChain
from meadowlark.config import Settings, get_settings
from meadowlark.context import RequestContext, get_context
from meadowlark.exceptions import (
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
from meadowlark.gates import (
    AccessPolicy,
    AllowRoles,
    CustomerOnly,
    EmployeeOnly,
    allow,
    customer_only,
    employee_only,
    gate,
)
from meadowlark.isolation import FaultIsolation, spawn
from meadowlark.middleware import ChainMiddleware
from meadowlark.server import start_server
from meadowlark.step import ChainStep, StepCategory
from meadowlark.store import DocumentStore, InMemoryDocumentStore, MongoDocumentStore

__all__ = [
    "AccessPolicy",
    "AllowRoles",
    "AutoViewResolver",
    "CSRFError",
    "Chain",
    "ChainMiddleware",
    "ChainStep",
    "ConfigurationError",
    "CustomerOnly",
    "DocumentStore",
    "EmployeeOnly",
    "FaultIsolation",
    "InMemoryDocumentStore",
    "MissingCredentials",
    "MongoDocumentStore",
    "PipelineAbort",
    "PipelineException",
    "RecordNotFound",
    "RequestContext",
    "ResolvedChain",
    "RouteConcealed",
    "Settings",
    "StepCategory",
    "StoreError",
    "Unauthorized",
    "UnknownEnvironment",
    "allow",
    "build_app",
    "customer_only",
    "employee_only",
    "gate",
    "get_context",
    "get_settings",
    "spawn",
    "start_server",
]
