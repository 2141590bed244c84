"""
Print the elasticsearch mapping of an annotated class
"""

import argparse
import importlib
import json
import logging
import sys

from esmapper.config import ENV_PREFIX, get_settings
from esmapper.mapping import get_mapping, get_mapping_as_json
from esmapper.models import MappingConfigurationError


def load_class(path: str) -> type:
    """Import a class given as 'package.module:ClassName'"""
    module_name, sep, class_name = path.partition(":")
    if not sep or not class_name:
        raise ValueError(f"Expected a class as module:ClassName, got {path!r}")
    module = importlib.import_module(module_name)
    cls = module
    for attr in class_name.split("."):
        cls = getattr(cls, attr)
    if not isinstance(cls, type):
        raise ValueError(f"{path} is not a class")
    return cls  # type: ignore[return-value]


def print_mapping(args):
    settings = get_settings()
    try:
        cls = load_class(args.cls)
    except (ImportError, AttributeError, ValueError) as e:
        logging.error(f"Cannot load class {args.cls}: {e}")
        sys.exit(1)

    indent = args.indent if args.indent is not None else settings.json_indent
    try:
        if indent is None:
            output = get_mapping_as_json(cls, require_id=args.require_id).decode("utf-8")
        else:
            output = json.dumps(get_mapping(cls, require_id=args.require_id), indent=indent, ensure_ascii=False)
    except MappingConfigurationError as e:
        logging.error(f"Cannot create mapping for {args.cls}: {e}")
        sys.exit(1)
    print(output)


def show_config(_args):
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m esmapper")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("mapping", help="Print the mapping of a class as JSON")
    p.add_argument("cls", help="The class to map, as package.module:ClassName")
    p.add_argument("-i", "--indent", type=int, help="Indent the JSON output with this many spaces")
    p.add_argument(
        "--require-id",
        action="store_true",
        default=None,
        dest="require_id",
        help="Fail if the class has no member marked as document id",
    )
    p.set_defaults(func=print_mapping)

    p = subparsers.add_parser("config", help="Show the current esmapper settings")
    p.set_defaults(func=show_config)

    args = parser.parse_args(argv)

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    es_logger = logging.getLogger("elasticsearch")
    es_logger.setLevel(logging.WARNING)

    args.func(args)


if __name__ == "__main__":
    main()
