"""Fetching of the entry WSDL document and every schema it transitively references."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Literal, Optional, Union
from urllib.parse import urldefrag, urljoin, urlparse
from urllib.request import url2pathname

from lxml import etree
import requests

from .errors import MalformedDocumentError, UnreachableResourceError
from .namespaces import XSD_NS, wsdl, xsd

log = logging.getLogger(__name__)

_REMOTE_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class RawDocument:
    """One fetched and parsed XML document."""

    location: str
    content: bytes
    element: etree._Element
    inherited_namespace: Optional[str] = None

    @property
    def is_schema(self) -> bool:
        return self.element.tag == xsd("schema")


@dataclass(frozen=True)
class LoadedDocuments:
    """Entry document plus every schema document reachable from it."""

    root: RawDocument
    schemas: tuple[RawDocument, ...]
    warnings: tuple[str, ...] = ()

    @property
    def documents(self) -> tuple[RawDocument, ...]:
        return (self.root, *self.schemas)


@dataclass(frozen=True)
class _PendingFetch:
    location: str
    inherited_namespace: Optional[str]
    referenced_from: str


def parse_xml(content: bytes, location: str) -> etree._Element:
    """Parse raw bytes into an element tree without network or entity expansion."""
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    try:
        return etree.fromstring(content, parser=parser, base_url=location)
    except etree.XMLSyntaxError as exc:
        raise MalformedDocumentError(location, str(exc), line=exc.lineno) from exc


def is_remote(location: str) -> bool:
    """Return whether a location is fetched over HTTP(S)."""
    return urlparse(location).scheme.lower() in _REMOTE_SCHEMES


def normalize_location(location: str) -> str:
    """Return the canonical form used to deduplicate fetched documents."""
    if is_remote(location):
        return urldefrag(location).url
    parsed = urlparse(location)
    if parsed.scheme == "file":
        location = url2pathname(parsed.path)
    return str(Path(location).expanduser().resolve())


def resolve_reference(base_location: str, reference: str) -> str:
    """Resolve a ``schemaLocation`` relative to the document that declares it."""
    if is_remote(reference) or urlparse(reference).scheme == "file":
        return normalize_location(reference)
    if is_remote(base_location):
        return normalize_location(urljoin(base_location, reference))
    return normalize_location(str(Path(base_location).parent / reference))


class _Fetcher:
    def __init__(self, session: requests.Session, *, insecure: bool) -> None:
        self._session = session
        self._insecure = insecure

    def fetch(self, location: str) -> bytes:
        if is_remote(location):
            log.debug("Fetching %s", location)
            try:
                response = self._session.get(location, verify=not self._insecure)
                response.raise_for_status()
            except requests.RequestException as exc:
                raise UnreachableResourceError(location, str(exc)) from exc
            return response.content

        log.debug("Reading %s", location)
        try:
            return Path(location).read_bytes()
        except OSError as exc:
            raise UnreachableResourceError(location, str(exc)) from exc

    def fetch_outcome(self, location: str) -> Union[bytes, UnreachableResourceError]:
        try:
            return self.fetch(location)
        except UnreachableResourceError as exc:
            return exc


def load_documents(
    location: str,
    *,
    insecure: bool = False,
    import_failure: Literal["warn", "error"] = "warn",
    max_workers: int = 1,
    session: Optional[requests.Session] = None,
) -> LoadedDocuments:
    """Fetch the entry document and, transitively, every imported or included schema.

    Args:
        location (str): Filesystem path or HTTP(S) URL of the entry WSDL or XSD.
        insecure (bool): Skip TLS certificate verification for HTTPS fetches.
        import_failure (Literal["warn", "error"]): Whether an unreachable nested schema
            is skipped with a warning or aborts the run.
        max_workers (int): Number of concurrent fetches per breadth-first level.
        session (Optional[requests.Session]): HTTP session to reuse; one is created and
            closed by this call when omitted.

    Returns:
        LoadedDocuments: Parsed entry document and schemas in deterministic load order.
    """
    if insecure:
        log.warning("TLS certificate verification is disabled for remote fetches")

    if session is not None:
        return _load(location, _Fetcher(session, insecure=insecure), import_failure, max_workers)
    with requests.Session() as owned_session:
        fetcher = _Fetcher(owned_session, insecure=insecure)
        return _load(location, fetcher, import_failure, max_workers)


def _load(
    location: str,
    fetcher: _Fetcher,
    import_failure: Literal["warn", "error"],
    max_workers: int,
) -> LoadedDocuments:
    entry = normalize_location(location)
    content = fetcher.fetch(entry)
    root = RawDocument(location=entry, content=content, element=parse_xml(content, entry))

    # A chameleon schema loads once per including namespace, a namespaced one loads once.
    seen: set[tuple[str, str]] = {(entry, "")}
    namespaced: set[str] = {entry} if _declares_namespace(root.element) else set()
    fetched: dict[str, Union[bytes, UnreachableResourceError]] = {}
    unreachable: set[str] = set()
    schemas: list[RawDocument] = []
    warnings: list[str] = []
    pending = list(_schema_references(root))

    while pending:
        level: list[_PendingFetch] = []
        for item in pending:
            key = (item.location, item.inherited_namespace or "")
            if key in seen or item.location in namespaced:
                continue
            seen.add(key)
            level.append(item)

        missing = [
            candidate
            for candidate in dict.fromkeys(item.location for item in level)
            if candidate not in fetched
        ]
        fetched.update(zip(missing, _fetch_level(fetcher, missing, max_workers)))

        next_pending: list[_PendingFetch] = []
        for item in level:
            outcome = fetched[item.location]
            if isinstance(outcome, UnreachableResourceError):
                if import_failure == "error":
                    raise outcome
                if item.location in unreachable:
                    continue
                unreachable.add(item.location)
                message = (
                    f"Skipping unreachable schema {item.location} referenced from "
                    f"{item.referenced_from}: {outcome.reason}"
                )
                log.warning(message)
                warnings.append(message)
                continue
            if item.location in namespaced:
                continue
            element = parse_xml(outcome, item.location)
            if _declares_namespace(element):
                namespaced.add(item.location)
            document = RawDocument(
                location=item.location,
                content=outcome,
                element=element,
                inherited_namespace=item.inherited_namespace,
            )
            schemas.append(document)
            next_pending.extend(_schema_references(document))
        pending = next_pending

    return LoadedDocuments(root=root, schemas=tuple(schemas), warnings=tuple(warnings))


def _declares_namespace(element: etree._Element) -> bool:
    return element.tag == wsdl("definitions") or bool(element.get("targetNamespace"))


def _fetch_level(
    fetcher: _Fetcher,
    locations: list[str],
    max_workers: int,
) -> list[Union[bytes, UnreachableResourceError]]:
    if max_workers <= 1 or len(locations) <= 1:
        return [fetcher.fetch_outcome(item) for item in locations]
    # Executor.map yields in submission order, so completion order never leaks out.
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(fetcher.fetch_outcome, locations))


def _schema_elements(document: RawDocument) -> Iterable[tuple[etree._Element, str]]:
    element = document.element
    if element.tag == xsd("schema"):
        namespace = element.get("targetNamespace") or document.inherited_namespace or ""
        yield element, namespace
        return
    if element.tag != wsdl("definitions"):
        return
    wsdl_namespace = element.get("targetNamespace", "")
    for types in element.iterchildren(wsdl("types")):
        for schema in types.iterchildren(xsd("schema")):
            yield schema, schema.get("targetNamespace") or wsdl_namespace


def _schema_references(document: RawDocument) -> Iterable[_PendingFetch]:
    for schema, namespace in _schema_elements(document):
        for child in schema.iterchildren(xsd("import"), xsd("include"), xsd("redefine")):
            schema_location = child.get("schemaLocation")
            is_import = child.tag == f"{{{XSD_NS}}}import"
            if not schema_location:
                if is_import:
                    log.debug(
                        "Namespace-only import of %s in %s",
                        child.get("namespace"),
                        document.location,
                    )
                    continue
                raise MalformedDocumentError(
                    document.location,
                    "include without schemaLocation",
                    line=child.sourceline,
                )
            yield _PendingFetch(
                location=resolve_reference(document.location, schema_location),
                inherited_namespace=None if is_import else namespace,
                referenced_from=document.location,
            )
