"""
Tests for item/collection resources and include handling.
"""

from restbase.api import Collection, Item, Manager, Paginator, Transformer


class AuthorTransformer(Transformer):
    available_includes = ["company"]

    def include_company(self, author):
        return self.item(author["company"])


class BookTransformer(Transformer):
    available_includes = ["author", "tags"]
    default_includes = ["stock"]

    def model_transform(self, book):
        return {"id": book["id"], "title": book["title"]}

    def include_author(self, book):
        if book.get("author") is None:
            return None
        return self.item(book["author"], AuthorTransformer())

    def include_tags(self, book):
        return self.collection(book["tags"])

    def include_stock(self, book):
        return self.item({"count": book["stock"]})


BOOK = {
    "id": 1,
    "title": "Dune",
    "stock": 3,
    "author": {"id": 7, "name": "Frank", "company": {"id": 9, "name": "Chilton"}},
    "tags": [{"id": 1, "name": "sf"}],
}


def test_parse_includes_adds_parents():
    manager = Manager().parse_includes("author.company, tags")

    assert manager.get_requested_includes() == ["author", "author.company", "tags"]


def test_parse_includes_list_and_duplicates():
    manager = Manager().parse_includes(["tags", "tags", " author "])

    assert manager.get_requested_includes() == ["tags", "author"]


def test_parse_includes_respects_recursion_limit():
    manager = Manager(recursion_limit=2).parse_includes("a.b.c.d")

    assert manager.get_requested_includes() == ["a", "a.b"]


def test_parse_includes_empty():
    assert Manager().parse_includes("").get_requested_includes() == []
    assert Manager().parse_includes(None).get_requested_includes() == []


def test_item_with_default_include_only():
    scope = Manager().create_data(Item(BOOK, BookTransformer))

    assert scope.to_dict() == {"data": {"id": 1, "title": "Dune", "stock": {"data": {"count": 3}}}}


def test_item_with_requested_includes():
    manager = Manager().parse_includes("author.company,tags")

    data = manager.create_data(Item(BOOK, BookTransformer())).to_dict()["data"]

    assert data["author"]["data"]["name"] == "Frank"
    assert data["author"]["data"]["company"] == {"data": {"id": 9, "name": "Chilton"}}
    assert data["tags"] == {"data": [{"id": 1, "name": "sf"}]}


def test_nested_include_needs_full_path():
    manager = Manager().parse_includes("company")

    data = manager.create_data(Item(BOOK, BookTransformer())).to_dict()["data"]

    assert "author" not in data
    assert "company" not in data


def test_include_returning_none_is_skipped():
    manager = Manager().parse_includes("author")
    book = dict(BOOK, author=None)

    data = manager.create_data(Item(book, BookTransformer())).to_dict()["data"]

    assert "author" not in data


def test_collection_with_meta_and_paginator():
    paginator = Paginator(items=[BOOK], total=1, per_page=10)
    collection = Collection([BOOK], BookTransformer(), paginator=paginator)
    collection.set_meta({"source": "test"})

    result = Manager().create_data(collection).to_dict()

    assert len(result["data"]) == 1
    assert result["meta"]["source"] == "test"
    assert result["meta"]["pagination"]["total"] == 1


def test_collection_without_meta_has_no_meta_key():
    result = Manager().create_data(Collection([], Transformer())).to_dict()

    assert result == {"data": []}


def test_item_of_none():
    assert Manager().create_data(Item(None, Transformer())).to_dict() == {"data": None}


def test_plain_callable_transformer():
    result = Manager().create_data(Item({"id": 5}, lambda record: {"key": record["id"]})).to_dict()

    assert result == {"data": {"key": 5}}
