"""Reference-cycle detection over the named-type registry.

Emitters use the result to defer evaluation of references to types that
are not fully defined yet (lazy schemas, forward declarations).
"""

from api_ir.parser.base import ApiType


def collect_refs(api_type: ApiType) -> list[str]:
    """Names referenced directly by ``api_type``, in first-seen order.

    Walks nested properties, array items, union variants and additional
    properties, but never into the body of another named type.
    """
    found: dict[str, None] = {}
    stack = [api_type]
    while stack:
        current = stack.pop()
        if current.kind == "ref":
            found.setdefault(current.name, None)
        elif current.kind == "object":
            if not isinstance(current.additional_properties, (bool, type(None))):
                stack.append(current.additional_properties)
            stack.extend(reversed([p.type for p in current.properties]))
        elif current.kind == "array":
            stack.append(current.items)
        elif current.kind == "union":
            stack.extend(reversed(current.variants))
        # primitive and enum types reference nothing
    return list(found)


def build_dependency_graph(types: dict[str, ApiType]) -> dict[str, list[str]]:
    """Map each named type to the registered names it references."""
    return {name: [ref for ref in collect_refs(t) if ref in types] for name, t in types.items()}


def find_circular_types(types: dict[str, ApiType]) -> set[str]:
    """Names of all types that lie on at least one reference cycle.

    Iterative depth-first search with an explicit path stack and low-link
    bookkeeping, so a cycle that closes through an already finished node is
    still attributed to every member. Linear in types plus references.
    """
    graph = build_dependency_graph(types)
    index: dict[str, int] = {}
    low: dict[str, int] = {}
    path: list[str] = []
    on_path: set[str] = set()
    circular: set[str] = set()

    def enter(node: str) -> None:
        index[node] = low[node] = len(index)
        path.append(node)
        on_path.add(node)

    for root in graph:
        if root in index:
            continue
        enter(root)
        work = [(root, iter(graph[root]))]

        while work:
            node, children = work[-1]
            for child in children:
                if child not in index:
                    enter(child)
                    work.append((child, iter(graph[child])))
                    break
                if child in on_path:
                    low[node] = min(low[node], index[child])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[node])
                if low[node] == index[node]:
                    members = []
                    while True:
                        member = path.pop()
                        on_path.discard(member)
                        members.append(member)
                        if member == node:
                            break
                    if len(members) > 1 or node in graph[node]:
                        circular.update(members)

    return circular
