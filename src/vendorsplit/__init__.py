# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for vendor split build components."""

from vendorsplit.aliases import AliasMap, build_alias_map
from vendorsplit.build import (
    ConfigurationError,
    ObfuscatedBuildOptions,
    ObfuscatedBuildResult,
    SharedVendor,
    obfuscated_build,
)
from vendorsplit.bundler import (
    BuildArtifact,
    BuildLog,
    BuildOutput,
    BuildRequest,
    BundlerError,
    EsbuildBundler,
    HostBundler,
    PluginLoadResult,
)
from vendorsplit.closure import DependencyClosure, collect_external_dependencies
from vendorsplit.comments import strip_comments
from vendorsplit.engine import JavaScriptObfuscatorEngine, TransformEngine, TransformError
from vendorsplit.plugin import ObfuscatorPlugin, javascript_obfuscator
from vendorsplit.resolver import ModuleResolution, resolve_local_module
from vendorsplit.rewriter import RewriteError, RewriteResult, rewrite_artifact, rewrite_imports
from vendorsplit.specifiers import (
    default_is_external,
    extract_specifiers,
    extract_valid_specifiers,
    is_valid_specifier,
)
from vendorsplit.vendor import VendorBuildOutcome, assemble_vendor_bundle, render_vendor_entry

__all__ = [
    "AliasMap",
    "BuildArtifact",
    "BuildLog",
    "BuildOutput",
    "BuildRequest",
    "BundlerError",
    "ConfigurationError",
    "DependencyClosure",
    "EsbuildBundler",
    "HostBundler",
    "JavaScriptObfuscatorEngine",
    "ModuleResolution",
    "ObfuscatedBuildOptions",
    "ObfuscatedBuildResult",
    "ObfuscatorPlugin",
    "PluginLoadResult",
    "RewriteError",
    "RewriteResult",
    "SharedVendor",
    "TransformEngine",
    "TransformError",
    "VendorBuildOutcome",
    "assemble_vendor_bundle",
    "build_alias_map",
    "collect_external_dependencies",
    "default_is_external",
    "extract_specifiers",
    "extract_valid_specifiers",
    "is_valid_specifier",
    "javascript_obfuscator",
    "obfuscated_build",
    "render_vendor_entry",
    "resolve_local_module",
    "rewrite_artifact",
    "rewrite_imports",
    "strip_comments",
]
