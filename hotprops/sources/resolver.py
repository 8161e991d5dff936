"""
Source resolution: turns source locators into property tables.

Supported locators:

- ``file:/abs/path``, ``file:///abs/path`` and bare filesystem paths
- ``classpath:rel/path`` searched under each root of the search path
  (``sys.path`` unless another search path is given)
- ``http://`` and ``https://`` URLs, fetched with requests

The format follows the file suffix: ``.xml`` (properties XML), ``.yaml`` /
``.yml`` and ``.json`` (mappings flattened to dotted keys), anything else
is the ``key=value`` text format.
"""

import io
import json
import sys
import xml.etree.ElementTree as ET
from pathlib import Path, PurePosixPath
from typing import Iterable, Mapping, Optional, Tuple
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
import yaml

from hotprops.core.enums import LoadType
from hotprops.core.exceptions import SourceLoadError
from hotprops.logger import get_hotprops_logger
from hotprops.sources.expander import VariablesExpander
from hotprops.store.properties import PropertyTable, to_property_value

FILE_PROTOCOL = "file"
CLASSPATH_PROTOCOL = "classpath"
HTTP_PROTOCOLS = ("http", "https")


class SourceResolver:
    """
    Loads the sources of a configuration and combines them according to
    its load policy.

    Parameters
    ----------
    search_path : `list[str]`, optional
        Roots searched for ``classpath:`` locators. Defaults to ``sys.path``.
    expander : `VariablesExpander`, optional
        Expands ``${...}`` in locators. Defaults to system variables and
        the environment.
    timeout : `float`
        Timeout in seconds for network sources.
    """

    def __init__(self, search_path: Optional[Iterable[str]] = None,
                 expander: Optional[VariablesExpander] = None,
                 timeout: float = 10.0):
        self.search_path = list(search_path) if search_path is not None else None
        self.expander = expander or VariablesExpander.system()
        self.timeout = timeout
        self.logger = get_hotprops_logger().bind(component="SourceResolver")

    def resolve(self, specs: Iterable[str], load_type: LoadType = LoadType.FIRST) -> PropertyTable:
        """
        Load `specs` in order.

        With LoadType.FIRST the first source that exists wins; with
        LoadType.MERGE every existing source is overlaid in list order, so
        later sources override earlier ones. Missing sources are skipped.

        Raises:
            SourceLoadError: If an existing source cannot be read or parsed
        """
        if load_type is LoadType.FIRST:
            for spec in specs:
                table = self.load_source(spec)
                if table is not None:
                    return table
            return PropertyTable()

        result = PropertyTable()
        for spec in specs:
            table = self.load_source(spec)
            if table is not None:
                result.update(table)
        return result

    def load_source(self, spec: str) -> Optional[PropertyTable]:
        """Load a single locator; None when the source does not exist."""
        locator = self.expander.expand(spec)
        scheme, target = _split_locator(locator)

        if scheme in HTTP_PROTOCOLS:
            data = self._fetch(locator)
            name = urlparse(locator).path
        else:
            path = self._locate(scheme, target)
            if path is None or not path.is_file():
                self.logger.debug("Source not found", source=locator)
                return None
            try:
                data = path.read_bytes()
            except OSError as e:
                raise SourceLoadError(locator, str(e)) from e
            name = str(path)

        if data is None:
            return None

        try:
            table = _parse(name, data)
        except (ValueError, yaml.YAMLError, ET.ParseError) as e:
            raise SourceLoadError(locator, str(e)) from e

        self.logger.debug("Source loaded", source=locator, keys=len(table))
        return table

    def local_file(self, spec: str) -> Optional[Path]:
        """
        The filesystem path behind a locator, or None for network sources
        and classpath resources that cannot be found.
        """
        scheme, target = _split_locator(self.expander.expand(spec))
        if scheme in HTTP_PROTOCOLS:
            return None
        return self._locate(scheme, target)

    def _locate(self, scheme: Optional[str], target: str) -> Optional[Path]:
        if scheme == CLASSPATH_PROTOCOL:
            roots = self.search_path if self.search_path is not None else sys.path
            for root in roots:
                candidate = Path(root) / target
                if candidate.is_file():
                    return candidate
            return None
        return Path(target)

    def _fetch(self, url: str) -> Optional[bytes]:
        try:
            response = requests.get(url, timeout=self.timeout)
            if response.status_code == 404:
                self.logger.debug("Source not found", source=url)
                return None
            response.raise_for_status()
        except requests.RequestException as e:
            raise SourceLoadError(url, str(e)) from e
        return response.content


def _split_locator(locator: str) -> Tuple[Optional[str], str]:
    """Split a locator into (scheme, target); scheme is None for bare paths."""
    scheme, sep, rest = locator.partition(":")
    scheme = scheme.lower()
    if not sep:
        return None, locator
    if scheme == FILE_PROTOCOL:
        return FILE_PROTOCOL, url2pathname(urlparse(locator).path)
    if scheme == CLASSPATH_PROTOCOL:
        return CLASSPATH_PROTOCOL, rest.lstrip("/")
    if scheme in HTTP_PROTOCOLS:
        return scheme, locator
    # Windows drive letters and anything unknown are plain paths
    return None, locator


def _parse(name: str, data: bytes) -> PropertyTable:
    suffix = PurePosixPath(name.replace("\\", "/")).suffix.lower()
    if suffix == ".xml":
        return _parse_xml(data)
    if suffix in (".yaml", ".yml"):
        return _flatten_document(yaml.safe_load(data.decode("utf-8")))
    if suffix == ".json":
        return _flatten_document(json.loads(data.decode("utf-8")))
    table = PropertyTable()
    table.load(io.BytesIO(data))
    return table


def _parse_xml(data: bytes) -> PropertyTable:
    root = ET.fromstring(data)
    if root.tag != "properties":
        raise ValueError(f"expected <properties> root element, got <{root.tag}>")
    table = PropertyTable()
    for entry in root.iter("entry"):
        key = entry.get("key")
        if key is None:
            raise ValueError("<entry> element without a 'key' attribute")
        table[key] = entry.text or ""
    return table


def _flatten_document(document) -> PropertyTable:
    table = PropertyTable()
    if document is None:
        return table
    if not isinstance(document, Mapping):
        raise ValueError(f"expected a mapping at top level, got {type(document).__name__}")
    _flatten(document, "", table)
    return table


def _flatten(data: Mapping, prefix: str, out: PropertyTable):
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            _flatten(value, full_key, out)
        elif value is not None:
            out[full_key] = to_property_value(value)
