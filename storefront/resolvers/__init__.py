"""
Resolvers - the named operations of the storefront.

    from storefront.resolvers import mutations, queries

    user = await mutations.signup(ctx, email="a@b.com", password="pw", name="A")
    page = await queries.items(ctx, skip=0, first=4)
"""

from storefront.resolvers import mutations, queries

__all__ = [
    "mutations",
    "queries",
]
