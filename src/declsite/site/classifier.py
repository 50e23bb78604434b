"""Member classification: group a declaration's members for rendering."""

from __future__ import annotations

from declsite.core.errors import UnknownCategoryError
from declsite.site.model import MemberBuckets
from declsite.site.resolver import DeclarationResolver
from declsite.symbols.protocols import Category, Decl

# Category -> MemberBuckets attribute
BUCKET_FOR_CATEGORY: dict[Category, str] = {
    Category.NAMESPACE: "namespaces",
    Category.CONTAINER: "containers",
    Category.GLOBAL_VARIABLE: "variables",
    Category.FUNCTION: "functions",
    Category.TYPE: "types",
    Category.TYPE_TYPE: "types",
    Category.TYPE_FUNCTION: "types",
    Category.ERROR_SET: "error_sets",
    Category.GLOBAL_CONST: "values",
    Category.PRIMITIVE: "values",
}


def member_list(
    resolver: DeclarationResolver, decl: Decl, *, include_private: bool = False
) -> list[Decl]:
    """Direct members of ``decl`` as the index lists them.

    Type functions expose their members through a dedicated query.
    """
    if resolver.category(decl) == Category.TYPE_FUNCTION:
        return list(resolver.index.type_function_members(decl))
    return list(resolver.index.members(decl, include_private))


def categorize_members(
    resolver: DeclarationResolver, decl: Decl, *, include_private: bool = False
) -> MemberBuckets:
    """Resolve each member's alias and drop it into its bucket.

    Raises:
        UnknownCategoryError: A resolved member has a category with no
            bucket (an alias that survived resolution, or engine drift).
    """
    buckets = MemberBuckets()
    for member in member_list(resolver, decl, include_private=include_private):
        member = resolver.resolve_alias(member)
        category = resolver.category(member)
        try:
            bucket = BUCKET_FOR_CATEGORY[category]
        except KeyError as e:
            raise UnknownCategoryError(category, cause=e).with_context(
                decl=member, fqn=resolver.index.fqn(member)
            ) from e
        getattr(buckets, bucket).append(member)
    return buckets


__all__ = ["BUCKET_FOR_CATEGORY", "categorize_members", "member_list"]
