"""depqueue - resolve dependency requests into one flattened dependency set

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys

from constants import Constants, ExitCodes, OutputFormats
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import resolve_settings
from resolution import (
    CatalogError,
    DependencyInvariantError,
    PackageCatalog,
    RequestQueue,
    Session,
    apply_queue,
    validate_queue,
)

logger = logging.getLogger(__name__)


def load_pkgs_file(file_name):
    """Loads dependency requests from a file.

    Blank lines and lines starting with '#' are ignored.

    Args:
        file_name (str): File path containing one request per line.

    Returns:
        list: List of requests
    """
    try:
        with open(file_name, encoding='utf-8') as file:
            lines = [line.strip() for line in file]
    except FileNotFoundError as e:
        logging.error("File not found: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except IOError as e:
        logging.error("IO error: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    return [line for line in lines if line and not line.startswith("#")]


def build_request_queue(args):
    """Build the request queue from positional atoms and list files, in that order."""
    queue = RequestQueue()
    for atom in getattr(args, "packages", None) or []:
        queue.push(atom)
    for list_file in getattr(args, "LIST_FROM_FILE", None) or []:
        for atom in load_pkgs_file(list_file):
            queue.push(atom)
    return queue


def dependency_to_dict(dep):
    """Serializable view of a flattened dependency entry."""
    match = dep.match
    return {
        "package": dep.package,
        "compare": dep.compare.value or None,
        "version": dep.version,
        "resolved": match.id if match is not None else None,
        "resolved_version": match.version if match is not None else None,
        "hits": match.hits if match is not None else 0,
    }


def select_lists(args, static):
    """Names of the world lists to report."""
    wanted = []
    if getattr(args, "PRINT_REQUIRES", False):
        wanted.append("requires")
    if getattr(args, "PRINT_REQUIRES_PRIVATE", False):
        wanted.append("requires_private")
    if not wanted:
        wanted.append("requires")
        if static:
            wanted.append("requires_private")
    return wanted


def collect_solution(_session, world, data, maxdepth):
    """Apply callback: snapshot the flattened world lists before it is released."""
    data["maxdepth"] = maxdepth
    data["requires"] = [dependency_to_dict(dep) for dep in world.required]
    data["requires_private"] = [dependency_to_dict(dep) for dep in world.requires_private]
    return True


def _render_line(entry):
    if entry["compare"] and entry["version"] is not None:
        return f"{entry['package']} {entry['compare']} {entry['version']}"
    return entry["package"]


def render(solution, lists, fmt):
    """Render the chosen lists as text or JSON."""
    if fmt == OutputFormats.JSON.value:
        return json.dumps({name: solution.get(name, []) for name in lists}, indent=2) + "\n"
    lines = []
    for name in lists:
        lines.extend(_render_line(entry) for entry in solution.get(name, []))
    return "".join(f"{line}\n" for line in lines)


def _output_format(args):
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT
    output = getattr(args, "OUTPUT", None)
    if output and output.lower().endswith(".json"):
        return OutputFormats.JSON.value
    return OutputFormats.TEXT.value


def write_output(text, path):
    """Write rendered output to ``path`` or stdout."""
    if not path:
        sys.stdout.write(text)
        return
    try:
        with open(path, "w", encoding="utf-8") as file:
            file.write(text)
        logging.info("Output written to %s", path)
    except IOError as e:
        logging.error("IO error writing %s: %s", path, e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    # Honor CLI --loglevel by passing it to centralized logger via env;
    # without the flag DEPQUEUE_LOG_LEVEL is left as the environment set it
    if args.LOG_LEVEL:
        os.environ[Constants.ENV_LOG_LEVEL] = args.LOG_LEVEL
    configure_logging(getattr(args, "LOG_FILE", None))

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    settings = resolve_settings(args)
    if not settings.catalog:
        logging.error("No package catalog given; use --catalog or DEPQUEUE_CATALOG.")
        sys.exit(ExitCodes.FILE_ERROR.value)
    try:
        catalog = PackageCatalog.from_file(settings.catalog)
    except CatalogError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    queue = build_request_queue(args)
    if not queue:
        logging.error("No dependency requests given.")
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)
    logging.info("Request queue: %s", ", ".join(queue))

    session = Session(catalog, search_private=settings.static)
    solution = {}
    try:
        if args.VALIDATE:
            ok = validate_queue(session, queue, settings.maxdepth)
        else:
            ok = apply_queue(session, queue, collect_solution, settings.maxdepth, solution)
    except DependencyInvariantError as e:
        logging.critical("Internal dependency graph error: %s", e)
        sys.exit(ExitCodes.INTERNAL_ERROR.value)
    finally:
        queue.free()

    if is_debug_enabled(logger):
        logger.debug(
            "Resolution finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="main",
                outcome="success" if ok else "failure",
            )
        )

    if not ok:
        logging.error("Dependency requests could not be resolved.")
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)

    if not args.VALIDATE:
        lists = select_lists(args, settings.static)
        write_output(render(solution, lists, _output_format(args)), getattr(args, "OUTPUT", None))

    sys.exit(ExitCodes.SUCCESS.value)

if __name__ == "__main__":
    main()
