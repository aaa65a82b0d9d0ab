"""Mercari v2 search API request/response types. Keys match the API (camelCase)."""

from __future__ import annotations

from typing import TypedDict


class SearchConditionSchema(TypedDict, total=False):
    """searchCondition object of the search request body."""

    keyword: str
    excludeKeyword: str
    sort: str
    order: str
    status: list[str]
    sizeId: list[int]
    categoryId: list[int]
    brandId: list[int]
    sellerId: list[str]
    priceMin: int
    priceMax: int
    itemConditionId: list[int]
    shippingPayerId: list[int]
    colorId: list[int]
    hasCoupon: bool
    attributes: list[str]
    itemTypes: list[str]
    skuIds: list[str]


class SearchRequestSchema(TypedDict, total=False):
    """POST /v2/entities:search body."""

    pageSize: int
    searchSessionId: str
    searchCondition: SearchConditionSchema
    serviceFrom: str
    withItemBrand: bool
    withItemSize: bool
    withItemPromotions: bool
    withItemSizes: bool
    withShopname: bool


class ItemBrandSchema(TypedDict, total=False):
    """Optional itemBrand object; id may be a number or a numeric string."""

    id: int | str
    name: str


class SearchItemSchema(TypedDict, total=False):
    """One element of items[]. Numeric fields may arrive as numbers or strings."""

    id: str
    name: str
    price: int | float | str
    status: str
    created: int | float | str
    updated: int | float | str
    thumbnails: list[str]
    itemType: str
    buyerId: str
    sellerId: str
    itemBrand: ItemBrandSchema | None
    itemConditionId: int | str


class SearchMetaSchema(TypedDict, total=False):
    """meta object: total hits and pagination."""

    numFound: int | str
    nextPageToken: str
    hasNext: bool


class SearchResponseSchema(TypedDict, total=False):
    """Search response body."""

    items: list[SearchItemSchema]
    meta: SearchMetaSchema
