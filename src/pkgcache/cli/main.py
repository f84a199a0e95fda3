"""Main CLI entry point for pkgcache.

Provides a command-line interface for inspecting and maintaining the local
package cache.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from pkgcache.cache import CacheConfig, PackageCache
from pkgcache.package import Package, PackageDependency
from pkgcache.versioning import SemanticVersion, VersionSpec

# Global console for Rich output
console = Console()


def open_cache(ctx_cache_dir: Optional[str] = None) -> PackageCache:
    """Open the package cache from multiple sources.

    Priority:
    1. Explicit --cache-dir flag
    2. NuGetCachePath environment variable
    3. Default application data location

    Args:
        ctx_cache_dir: Cache directory from CLI context

    Returns:
        PackageCache instance (null-backed if the location is unavailable)
    """
    config = CacheConfig.from_env()
    if ctx_cache_dir:
        config.cache_dir = Path(ctx_cache_dir).expanduser()
    return PackageCache.create_default(config=config)


def _packages_table(title: str, packages) -> Table:
    table = Table(title=title)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Version", style="green")
    table.add_column("Pre-release", justify="center", style="yellow")
    table.add_column("Dependencies", style="white")

    for package in packages:
        deps = ", ".join(str(d) for d in package.dependencies)
        table.add_row(
            package.id,
            str(package.version),
            "yes" if package.version.is_prerelease else "",
            (deps[:40] + "...") if len(deps) > 40 else deps,
        )
    return table


@click.group()
@click.option(
    "--cache-dir",
    "-C",
    type=click.Path(),
    help="Package cache directory (default: NuGetCachePath env var or app data location)",
)
@click.pass_context
def cli(ctx, cache_dir):
    """pkgcache CLI - Inspect and maintain the local package cache.

    Use --cache-dir/-C to point at a cache, or set the NuGetCachePath
    environment variable.
    """
    ctx.ensure_object(dict)
    ctx.obj["cache_dir"] = cache_dir


@cli.command("path")
@click.pass_context
def cache_path(ctx):
    """Print the cache root directory.

    Example:
        pkgcache path
    """
    cache = open_cache(ctx.obj.get("cache_dir"))
    if cache.source:
        console.print(cache.source, soft_wrap=True)
    else:
        console.print("[yellow](unavailable)[/yellow]")


@cli.command("list")
@click.option("--id", "package_id", help="Only show versions of this package id")
@click.pass_context
def cache_list(ctx, package_id):
    """List cached packages.

    Example:
        pkgcache list
        pkgcache list --id Newtonsoft.Json
    """
    try:
        cache = open_cache(ctx.obj.get("cache_dir"))

        if package_id:
            packages = sorted(cache.find_packages_by_id(package_id), key=lambda p: p.version)
        else:
            packages = [p for _, group in cache.group_by_id() for p in group]

        if not packages:
            console.print("[yellow]No cached packages found[/yellow]")
            return

        console.print(_packages_table(f"Cached packages ({len(packages)})", packages))

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("add")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def cache_add(ctx, files):
    """Add package archive files to the cache.

    Example:
        pkgcache add Newtonsoft.Json.4.0.1.nupkg
    """
    try:
        cache = open_cache(ctx.obj.get("cache_dir"))

        for file_path in files:
            package = Package.from_bytes(Path(file_path).read_bytes())
            cache.add_package(package)
            console.print(f"[green]✓[/green] Added {package}")

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("remove")
@click.argument("package_id")
@click.argument("version")
@click.pass_context
def cache_remove(ctx, package_id, version):
    """Remove one package version from the cache.

    Example:
        pkgcache remove Newtonsoft.Json 4.0.1
    """
    try:
        cache = open_cache(ctx.obj.get("cache_dir"))
        semver = SemanticVersion.parse(version)

        if not cache.exists(package_id, semver):
            console.print(f"[yellow]{package_id} {version} is not cached[/yellow]")
            return

        cache.remove_package(Package(package_id, semver))
        console.print(f"[green]✓[/green] Removed {package_id} {version}")

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def cache_clear(ctx, yes):
    """Delete every cached package.

    Example:
        pkgcache clear -y
    """
    try:
        cache = open_cache(ctx.obj.get("cache_dir"))

        # Confirmation
        if not yes:
            if not click.confirm(f"Clear package cache at '{cache.source}'?"):
                console.print("[yellow]Cancelled[/yellow]")
                return

        cache.clear()
        remaining = sum(1 for _ in cache.get_package_files())
        if remaining:
            console.print(f"[yellow]Cleared cache, {remaining} file(s) could not be deleted[/yellow]")
        else:
            console.print("[green]✓[/green] Cleared package cache")

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("updates")
@click.argument("package_id")
@click.argument("version")
@click.option("--prerelease", is_flag=True, help="Include pre-release versions")
@click.option("--all", "all_versions", is_flag=True, help="Show every newer version")
@click.pass_context
def cache_updates(ctx, package_id, version, prerelease, all_versions):
    """Show cached versions newer than an installed version.

    Example:
        pkgcache updates Newtonsoft.Json 4.0.1 --all
    """
    try:
        cache = open_cache(ctx.obj.get("cache_dir"))
        installed = Package(package_id, SemanticVersion.parse(version))

        updates = cache.get_updates(
            [installed],
            include_prerelease=prerelease,
            include_all_versions=all_versions,
        )

        if not updates:
            console.print(f"[yellow]No cached updates for {installed}[/yellow]")
            return

        console.print(_packages_table(f"Updates for {installed} ({len(updates)})", updates))

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("resolve")
@click.argument("package_id")
@click.argument("version_range", required=False, default="")
@click.option("--prerelease", is_flag=True, help="Allow pre-release versions")
@click.pass_context
def cache_resolve(ctx, package_id, version_range, prerelease):
    """Resolve a dependency against the cached packages.

    Example:
        pkgcache resolve Newtonsoft.Json "[4.0,5.0)"
    """
    try:
        cache = open_cache(ctx.obj.get("cache_dir"))
        dependency = PackageDependency(
            package_id, VersionSpec.parse(version_range) if version_range else None
        )

        package = cache.resolve_dependency(
            dependency,
            allow_prerelease_versions=prerelease,
            prefer_listed_packages=True,
        )

        if package is None:
            console.print(f"[red]✗[/red] No cached package satisfies {dependency}", style="red")
            sys.exit(1)

        console.print(f"[green]✓[/green] {dependency} → {package}")

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


if __name__ == "__main__":
    cli()
