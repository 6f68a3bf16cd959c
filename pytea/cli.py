"""CLI interface for pytea."""

import logging
from typing import Any, Optional

import click

from .api import DEFAULT_TOKEN_NAME, GiteaClient, create_access_token
from .config import DEFAULT_SCRIPT_FOLDER, Configuration, RemoteRepository
from .exceptions import PyteaError, format_failure
from .feature_sets import FeatureSetManager
from .output import OutputFormatter

logger = logging.getLogger(__name__)


def _load_config(ctx: Any) -> Configuration:
    if "config" not in ctx.obj:
        ctx.obj["config"] = Configuration.read(ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _create_client(repo: RemoteRepository) -> GiteaClient:
    return GiteaClient(
        url=repo.url,
        api_token=repo.api_token,
        owner=repo.owner,
        repository=repo.repository,
    )


def _get_manager(ctx: Any) -> FeatureSetManager:
    """Build the feature set manager from the loaded configuration."""
    conf = _load_config(ctx)
    return FeatureSetManager(
        _create_client(conf.repo),
        author=conf.repo.author,
        email=conf.repo.email,
        script_dir=conf.script_folder,
        root=conf.root_folder,
    )


def _fail(ctx: Any, action: str, error: PyteaError) -> None:
    out: OutputFormatter = ctx.obj["out"]
    logger.debug("%s", action, exc_info=error)
    out.error(format_failure(action, error))
    ctx.exit(1)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    envvar="PYTEA_CONFIG",
    type=click.Path(dir_okay=False),
    help="Use a custom configuration file",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pytea")
@click.pass_context
def main(
    ctx: Any,
    config_path: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """pytea - Manage feature sets of scripts and configuration files in Gitea."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pytea").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("url")
@click.argument("repository")
@click.argument("owner")
@click.option("--token", "api_token", help="Existing Gitea api token")
@click.option(
    "--name",
    "token_name",
    default=DEFAULT_TOKEN_NAME,
    show_default=True,
    help="Name for a newly created api token",
)
@click.option("--author", help="Commit author name (default: OWNER)")
@click.option("--email", default="", help="Commit author email")
@click.option(
    "--script-folder",
    default=DEFAULT_SCRIPT_FOLDER,
    show_default=True,
    help="Local folder for script files",
)
@click.pass_context
def init(
    ctx: Any,
    url: str,
    repository: str,
    owner: str,
    api_token: Optional[str],
    token_name: str,
    author: Optional[str],
    email: str,
    script_folder: str,
) -> None:
    """Create a new configuration for pytea.

    URL: Base url of the Gitea instance
    REPOSITORY: Repository holding the feature sets
    OWNER: Owner of the repository

    Without --token a new api token is created with your Gitea username
    and password.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        if not api_token:
            out.info(f"Requesting a new api token with name {token_name}")
            username = click.prompt("Username")
            password = click.prompt("Password", hide_input=True)
            token = create_access_token(url, username, password, token_name)
            out.info(str(token))
            api_token = token.sha1

        conf = Configuration(
            repo=RemoteRepository(
                url=url,
                api_token=api_token,
                repository=repository,
                owner=owner,
                author=author or owner,
                email=email,
            ),
            script_folder=script_folder,
        )

        out.info("Testing connection to gitea...")
        with _create_client(conf.repo) as client:
            version = client.get_server_version()
            repo_info = client.get_repository_info()
        out.info(str(version))
        out.info(f"Repository: {repo_info.full_name}")

        config_path = conf.write(ctx.obj.get("config_path"))
        out.print_summary(
            "Initialization Complete",
            [
                ("Status", "✓ Configuration saved successfully"),
                ("Config file", str(config_path)),
            ],
        )
    except PyteaError as e:
        _fail(ctx, "Failed to initialize pytea", e)


@main.command(name="config")
@click.pass_context
def show_config(ctx: Any) -> None:
    """Print the current configuration."""
    try:
        conf = _load_config(ctx)
    except PyteaError as e:
        _fail(ctx, "Failed to read configuration", e)
        return
    ctx.obj["out"].print_summary("Configuration", conf.to_summary_items())


@main.command()
@click.pass_context
def info(ctx: Any) -> None:
    """Show information about Gitea and the configuration repository."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_manager(ctx) as manager:
            version, repository = manager.info()
    except PyteaError as e:
        _fail(ctx, "Failed to fetch repository information", e)
        return

    if out.json_output:
        out.output_json({"version": version.version, "repository": repository.to_dict()})
        return
    out.print(str(version))
    out.print_summary(f"Repository {repository.id}", repository.to_summary_items())


@main.command(name="list")
@click.argument("name", required=False)
@click.pass_context
def list_(ctx: Any, name: Optional[str]) -> None:
    """Show the feature sets stored in the repository.

    NAME: List the files of this feature set instead
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_manager(ctx) as manager:
            if name:
                listing = manager.list_feature_set(name)
                title = f"Feature Set: {name}"
            else:
                listing = manager.list_feature_sets()
                title = "Feature Sets"
    except PyteaError as e:
        _fail(ctx, "Failed to list feature sets", e)
        return

    if out.json_output:
        out.output_json(listing.to_dict())
        return
    if listing.is_empty:
        out.info(f"{title}: none")
        return
    out.output_table(
        listing.to_table_data(),
        ["name", "type", "path"],
        {"name": "Name", "type": "Type", "path": "Path"},
        title=title,
    )


@main.command()
@click.argument("name")
@click.option("--message", "-m", help="Commit message")
@click.pass_context
def new(ctx: Any, name: str, message: Optional[str]) -> None:
    """Create a new empty feature set in the repository.

    NAME: Name of the feature set
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_manager(ctx) as manager:
            created = manager.new_feature_set(name, message)
    except PyteaError as e:
        _fail(ctx, f"Failed to create feature set {name}", e)
        return

    if out.json_output:
        out.output_json({"feature_set": name, "created": created})
    elif created:
        out.success(f"✓ Created feature set {name}")
    else:
        out.info(f"Feature set {name} already exists")


@main.command()
@click.argument("name")
@click.argument("path", required=False)
@click.option("--script", "-s", is_flag=True, help="Delete a script file")
@click.option("--recursive", "-r", is_flag=True, help="Delete a remote folder recursively")
@click.option("--message", "-m", help="Commit message")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete(
    ctx: Any,
    name: str,
    path: Optional[str],
    script: bool,
    recursive: bool,
    message: Optional[str],
    yes: bool,
) -> None:
    """Delete a feature set or parts of it.

    NAME: Name of the feature set
    PATH: Script file name (with --script) or configuration path
    """
    out: OutputFormatter = ctx.obj["out"]

    if (
        path is None
        and not yes
        and not out.quiet
        and not click.confirm(f"Are you sure you want to delete feature set {name}?")
    ):
        out.warning("Deletion cancelled.")
        return

    try:
        with _get_manager(ctx) as manager:
            deleted = manager.delete(name, path, script, recursive, message)
    except PyteaError as e:
        target = f"{name}/{path}" if path else name
        _fail(ctx, f"Failed to delete {target}", e)
        return

    if out.json_output:
        out.output_json({"deleted": deleted})
        return
    for remote_path in deleted:
        out.progress_message(f"Deleted {remote_path}")
    out.success(f"✓ Deleted {len(deleted)} file(s) from feature set {name}")


@main.command()
@click.argument("name")
@click.argument("path", required=False, type=click.Path())
@click.option("--script", "-s", is_flag=True, help="Push a script file or folder")
@click.option("--message", "-m", help="Commit message")
@click.pass_context
def push(
    ctx: Any, name: str, path: Optional[str], script: bool, message: Optional[str]
) -> None:
    """Push local files into a feature set.

    NAME: Name of the feature set
    PATH: Local config or script file or folder. Without it every file of
    the feature set with a local copy is pushed.
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_manager(ctx) as manager:
            pushed = manager.push(name, path, script, message)
    except PyteaError as e:
        _fail(ctx, f"Failed to push feature set {name}", e)
        return

    if out.json_output:
        out.output_json({"pushed": pushed})
        return
    for remote_path in pushed:
        out.progress_message(f"Pushed {remote_path}")
    out.success(f"✓ Pushed {len(pushed)} file(s) into feature set {name}")


@main.command()
@click.argument("name")
@click.argument("path", required=False)
@click.option("--script", "-s", is_flag=True, help="Pull only the script files")
@click.option("--config", "-c", is_flag=True, help="Pull only the configuration files")
@click.pass_context
def pull(
    ctx: Any, name: str, path: Optional[str], script: bool, config: bool
) -> None:
    """Deploy a feature set from the repository.

    NAME: Name of the feature set
    PATH: Pull only files whose remote path ends with PATH
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_manager(ctx) as manager:
            pulled = manager.pull(name, path, script, config)
    except PyteaError as e:
        _fail(ctx, f"Failed to pull feature set {name}", e)
        return

    if out.json_output:
        out.output_json({"pulled": [str(p) for p in pulled]})
        return
    for local_path in pulled:
        out.progress_message(f"Pulled {local_path}")
    out.success(f"✓ Pulled {len(pulled)} file(s) from feature set {name}")


@main.command()
@click.argument("name")
@click.argument("new_name")
@click.option("--message", "-m", help="Commit message")
@click.pass_context
def rename(ctx: Any, name: str, new_name: str, message: Optional[str]) -> None:
    """Rename a feature set.

    NAME: Current name of the feature set
    NEW_NAME: New name of the feature set

    All files are copied to NEW_NAME, then NAME is deleted. If the command
    fails halfway, run it again.
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_manager(ctx) as manager:
            copied = manager.rename(name, new_name, None, message)
    except PyteaError as e:
        _fail(ctx, f"Failed to rename feature set {name}", e)
        return

    if out.json_output:
        out.output_json({"renamed": name, "to": new_name, "files": copied})
        return
    out.success(f"✓ Renamed feature set {name} to {new_name} ({len(copied)} file(s))")


if __name__ == "__main__":
    main()
