"""
The entry point for the CLI tool.

Loads resource definitions from a JSON file and prints the
records a find returns, which is handy for checking a schema
against a live API:

.. code:: bash

    nagrest --schemas schemas.json --base-url https://api.example.com user 1
"""

import argparse
import json
import sys
from typing import Dict, List, Optional

import uvloop

from nagrest import logger
from nagrest.config import RestConfig
from nagrest.http import HttpClient
from nagrest.repository import RepositoryFactory
from nagrest.schema_manager import SchemaManager
from nagrest.version import __version__, name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=name, description="Find records through a registered resource schema.")
    parser.add_argument("--version", action="version", version=f"{name} {__version__}")
    parser.add_argument("--schemas", required=True, type=argparse.FileType("r"),
                        help="A JSON file mapping resource names to their definitions.")
    parser.add_argument("--base-url", help="The base url of the API.")
    parser.add_argument("--method", default="GET", help="The HTTP method of the find (GET, POST or JSONP).")
    parser.add_argument("--query", action="append", default=[], metavar="KEY=VALUE",
                        help="A query string value, may be repeated.")
    parser.add_argument("--header", action="append", default=[], metavar="NAME:VALUE",
                        help="A request header, may be repeated.")
    shape = parser.add_mutually_exclusive_group()
    shape.add_argument("--array", dest="is_array", action="store_const", const=True,
                       help="Parse the response as a list of records.")
    shape.add_argument("--single", dest="is_array", action="store_const", const=False,
                       help="Parse the response as a single record.")
    parser.add_argument("resource", help="The name of the resource to find.")
    parser.add_argument("identifier", nargs="?", help="The identifier of a single record.")
    return parser


def parse_pairs(values: List[str], separator: str) -> Dict[str, str]:
    """Splits ``key<separator>value`` arguments into a dictionary."""
    pairs = {}
    for value in values:
        key, found, rest = value.partition(separator)
        if not found:
            raise ValueError(f"Expected {key!r} to be of the form key{separator}value.")
        pairs[key.strip()] = rest.strip()
    return pairs


async def find(args: argparse.Namespace) -> Optional[object]:
    """Runs the find described by the arguments and returns the records as JSON data."""
    config = RestConfig(args.base_url)
    schema_manager = SchemaManager(config)
    for resource_name, definition in json.load(args.schemas).items():
        schema_manager.add(resource_name, definition)

    http = HttpClient(config)
    try:
        repository = RepositoryFactory(schema_manager, http, config).create(args.resource)
        if args.is_array is not None:
            repository.force_is_array(args.is_array)
        params = args.identifier if args.identifier is not None else parse_pairs(args.query, "=")
        query = parse_pairs(args.query, "=") if args.identifier is not None else None
        result = await repository.find(
            params, method=args.method, query=query, headers=parse_pairs(args.header, ":") or None
        )
    finally:
        await http.close()

    if isinstance(result.parsed_data, list):
        return [model.manager.to_json() for model in result.parsed_data]
    if result.parsed_data is None:
        return None
    return result.parsed_data.manager.to_json()


def run(argv: List[str] = None):
    """Parses the arguments, runs the find and prints the result."""
    args = build_parser().parse_args(argv)
    try:
        records = uvloop.run(find(args))
    except Exception as error:
        logger.error("Find failed: %s", error)
        sys.exit(1)
    print(json.dumps(records, indent=2, default=str))


if __name__ == '__main__':
    run()
