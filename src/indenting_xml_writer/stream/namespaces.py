"""Scoped prefix to namespace URI bindings."""

from typing import Dict, List, Optional

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XMLNS_NAMESPACE = "http://www.w3.org/2000/xmlns/"

DEFAULT_PREFIX = ""


class NamespaceContext:
    """Stack of namespace scopes, one per open element.

    The bottom scope holds the ``xml`` and ``xmlns`` bindings plus whatever is
    bound before the first element is written. The default namespace is bound
    under the empty prefix.
    """

    def __init__(self, bindings: Optional[Dict[str, str]] = None) -> None:
        root = {"xml": XML_NAMESPACE, "xmlns": XMLNS_NAMESPACE}
        if bindings:
            root.update(bindings)
        self._scopes: List[Dict[str, str]] = [root]

    @property
    def depth(self) -> int:
        """Number of scopes pushed above the root scope."""
        return len(self._scopes) - 1

    def push_scope(self) -> None:
        self._scopes.append({})

    def pop_scope(self) -> None:
        if len(self._scopes) == 1:
            raise IndexError("Cannot pop the root namespace scope")
        self._scopes.pop()

    def bind(self, prefix: str, namespace_uri: str) -> None:
        """Bind ``prefix`` in the innermost scope."""
        self._scopes[-1][prefix] = namespace_uri

    def get_namespace_uri(self, prefix: str) -> Optional[str]:
        for scope in reversed(self._scopes):
            if prefix in scope:
                return scope[prefix]
        return None

    def get_prefix(self, namespace_uri: str) -> Optional[str]:
        """Return one prefix currently bound to ``namespace_uri``.

        A prefix shadowed by an inner binding to another URI does not count.
        """
        for prefix in self.get_prefixes(namespace_uri):
            return prefix
        return None

    def get_prefixes(self, namespace_uri: str) -> List[str]:
        prefixes: List[str] = []
        seen = set()
        for scope in reversed(self._scopes):
            for prefix, uri in scope.items():
                if prefix in seen:
                    continue
                seen.add(prefix)
                if uri == namespace_uri:
                    prefixes.append(prefix)
        return prefixes
