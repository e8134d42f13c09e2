import asyncio
from itertools import groupby

import pytest

from conftest import BASE, make_file
from minisite.build import ResourceGraphBuilder, build_graph
from minisite.config import Options
from minisite.errors import (
    ConfigurationError,
    InvalidInjectionError,
    ParseError,
    PathCollisionError,
)
from minisite.files import SourceFile
from minisite.resource import build_resource


def graph(files, **options):
    return asyncio.run(build_graph(files, Options(**options)))


def chunk(items, size):
    return [items[i : i + size] for i in range(0, len(items), size)]


def by_source(result):
    return {r.src_relative: r for r in result.resources}


def test_index_collection_order_and_links(create):
    result = graph(
        [
            create("items/index.yml", {}),
            create("items/#1.foo.yml", {"title": "FOO"}),
            create("items/#2.bar.yml", {"title": "BAR"}),
        ]
    )
    res = by_source(result)
    index, foo, bar = res["items/index.yml"], res["items/#1.foo.yml"], res["items/#2.bar.yml"]
    assert index.collection == [foo, bar]
    assert foo.next is bar
    assert bar.prev is foo
    assert foo.prev is None
    assert bar.next is None
    assert index.collection is result.state[""].collections["items"]


def test_collection_of_non_index_page(create):
    result = graph(
        [
            create("items/foo.yml", {"title": "FOO"}),
            create("items/foo/003.yml", {"title": "FOO 003"}),
            create("items/foo/001.yml", {"title": "FOO 001"}),
            create("items/foo/002.yml", {"title": "FOO 002"}),
        ]
    )
    foo = result.resources[0]
    assert [r.title for r in foo.collection] == ["FOO 001", "FOO 002", "FOO 003"]
    assert foo.next is None
    assert [r.title for r in result.state[""].collections["items"]] == ["FOO"]


def test_leaf_documents_have_empty_collections(create):
    result = graph([create("hello.yml", {})])
    assert result.resources[0].collection == []


def test_collections_sorted_by_order(create):
    result = graph(
        [
            create("items/#2.bar.yml", {"title": "BAR"}),
            create("items/#3.baz.yml", {"title": "BAZ"}),
            create("items/#1.foo.yml", {"title": "FOO"}),
        ]
    )
    items = result.state[""].collections["items"]
    assert [r.title for r in items] == ["FOO", "BAR", "BAZ"]
    # input order of retained resources is untouched
    assert [r.title for r in result.resources] == ["BAR", "BAZ", "FOO"]


def test_unordered_siblings_sort_first(create):
    result = graph(
        [
            create("items/#1.first.yml", {}),
            create("items/zeta.yml", {}),
            create("items/alpha.yml", {}),
        ]
    )
    items = result.state[""].collections["items"]
    assert [r.slug for r in items] == ["alpha", "zeta", "first"]


def test_empty_order_tag_sorts_as_unordered(create):
    result = graph(
        [
            create("items/#1.first.yml", {}),
            create("items/#.foo.yml", {}),
            create("items/zeta.yml", {}),
        ]
    )
    items = result.state[""].collections["items"]
    assert [r.slug for r in items] == ["foo", "zeta", "first"]
    assert items[0].order is None


def test_prev_next_links(create):
    result = graph(
        [
            create("items/001.yml", {"title": "1"}),
            create("items/002.yml", {"title": "2"}),
            create("items/003.yml", {"title": "3"}),
        ]
    )
    one, two, three = result.resources
    assert one.prev is None and one.next is two
    assert two.prev is one and two.next is three
    assert three.prev is two and three.next is None


def test_hidden_documents_stay_in_collections(create):
    result = graph(
        [
            create("items.yml", {}),
            create("items/.#001.foo.yml", {"title": "FOO"}),
            create("items/.#002.bar.yml", {"title": "BAR"}),
        ]
    )
    items = result.resources[0]
    assert not items.hidden
    assert [r.title for r in items.collection] == ["FOO", "BAR"]
    assert all(r.hidden for r in items.collection)


def test_pages_references_and_collections_per_locale(create):
    result = graph(
        [
            create("foo.yml", {"title": "FOO"}),
            create("bar/baz.yml", {"title": "BAZ"}),
            create("foo.ja.yml", {"title": "FOO J"}),
            create("bar/baz.ja.yml", {"title": "BAZ J"}),
            create("logo.png", body="x"),
        ],
        locales=["en", "ja"],
        default_locale="en",
    )
    en, ja = result.state["en"], result.state["ja"]
    assert [r.title for r in en.pages] == ["FOO", "BAZ"]
    assert [r.title for r in ja.pages] == ["FOO J", "BAZ J"]
    assert en.references["bar/baz"].title == "BAZ"
    assert ja.references["foo"].title == "FOO J"
    assert [r.title for r in ja.collections["bar"]] == ["BAZ J"]
    assert result.state[""].pages == []
    assert len(result.resources) == 5


def test_locales_group_is_shared(create):
    result = graph(
        [
            create("hello.en.yml", {"title": "Hello En"}),
            create("hello.ja.yml", {"title": "Hello Ja"}),
            create("hello.de.yml", {"title": "Hello De"}),
        ],
        locales=["en", "ja", "de"],
    )
    en, ja, de = result.resources
    assert en.locales is ja.locales is de.locales
    assert en.locales == {"en": en, "ja": ja, "de": de}
    assert result.state.resource_group["hello"] is en.locales


def test_locales_contains_self(create):
    result = graph([create("solo.yml", {})])
    solo = result.resources[0]
    assert solo.locales == {"": solo}


def test_index_collections_per_locale(create):
    result = graph(
        [
            create("items/index.yml", {}),
            create("items/#1.foo.yml", {"title": "FOO"}),
            create("items/#2.bar.yml", {"title": "BAR"}),
            create("items/index.ja.yml", {}),
            create("items/#1.foo.ja.yml", {"title": "FOO J"}),
            create("items/#2.bar.ja.yml", {"title": "BAR J"}),
        ],
        locales=["en", "ja"],
        default_locale="en",
    )
    index_en, index_ja = result.resources[0], result.resources[3]
    assert [r.title for r in index_en.collection] == ["FOO", "BAR"]
    assert [r.title for r in index_ja.collection] == ["FOO J", "BAR J"]
    assert index_en.locales is index_ja.locales


def test_duplicate_filepath_is_fatal(create):
    with pytest.raises(PathCollisionError) as excinfo:
        graph(
            [create("hello.json", body="{}"), create("hello.yml", {})],
            document_types=["yml", "json"],
        )
    message = str(excinfo.value)
    assert "same path" in message
    assert "hello.json" in message
    assert "hello.yml" in message
    assert excinfo.value.filepath == BASE / "hello" / "index.html"


def test_default_locale_collides_with_untagged(create):
    with pytest.raises(PathCollisionError):
        graph(
            [create("hello.yml", {}), create("hello.ja.yml", {})],
            locales=["ja"],
            default_locale="ja",
        )


def test_drafts_are_dropped_unless_enabled(create):
    files = [create("hello.yml", {}), create("_draft.yml", {}), create("_wip/post.yml", {})]
    assert [r.src_relative for r in graph(files).resources] == ["hello.yml"]

    files = [create("hello.yml", {}), create("_draft.yml", {}), create("_wip/post.yml", {})]
    drafts = graph(files, draft=True)
    assert len(drafts.resources) == 3
    assert drafts.resources[2].path == "/wip/post/"


def test_dropped_drafts_do_not_collide(create):
    result = graph([create("hello.yml", {}), create("_hello.yml", {})])
    assert len(result.resources) == 1


def test_file_is_annotated_and_rerouted(create):
    file = create("foo/bar.yml", {})
    result = graph([file])
    resource = result.resources[0]
    assert file.resource is resource
    assert file.path == BASE / "foo" / "bar" / "index.html"
    assert file.relative == "foo/bar/index.html"


def test_parse_error_aborts(create):
    with pytest.raises(ParseError):
        graph([create("ok.yml", {}), create("#1.yml", {})])


def test_multilocale_site(create):
    site = {"": {"name": "No locale"}, "en": {"name": "En"}, "ja": {"name": "Ja"}}
    result = graph([create("hello.yml", {})], locales=["en", "ja"], site=site)
    assert result.state[""].site == {"name": "No locale"}
    assert result.state["en"].site == {"name": "En"}
    assert result.state["ja"].site == {"name": "Ja"}


def test_site_without_exact_locales_is_shared(create):
    site = {"name": "Site", "en": {"name": "En"}, "ja": {"name": "Ja"}}
    result = graph([create("hello.yml", {})], locales=["en", "ja"], site=site)
    assert result.state["en"].site is site
    assert result.state[""].site is site


def test_idempotent_routing():
    files = [
        make_file("index.yml", {}),
        make_file("items/#1.foo.ja.yml", {}),
        make_file("items/bar.yml", {}),
        make_file("img/logo.png", body="x"),
    ]

    def fields(result):
        return [
            (r.path, r.filepath, r.resource_id, r.collection_id) for r in result.resources
        ]

    first = graph(files, locales=["ja"])
    assert files[1].path == BASE / "ja" / "items" / "foo" / "index.html"
    second = graph(files, locales=["ja"])
    assert fields(first) == fields(second)
    assert [r.src_relative for r in second.resources] == [
        "index.yml",
        "items/#1.foo.ja.yml",
        "items/bar.yml",
        "img/logo.png",
    ]


# injection
# =========


def test_inject_pagination(create):
    files = [create(f"items/{i:02d}.yml", {}) for i in range(1, 11)]

    def paginate(state, options):
        pages = chunk(state[""].collections["items"], 3)
        return [
            make_file(
                "items/index.yml" if i == 0 else f"items/page/{i + 1}.yml",
                {"offset": i * 3},
            )
            for i, _ in enumerate(pages)
        ]

    result = graph(files, inject=paginate)
    assert len(result.resources) == 14
    injected = result.resources[10:]
    assert [r.offset for r in injected] == [0, 3, 6, 9]
    assert [r.path for r in injected] == [
        "/items/",
        "/items/page/2/",
        "/items/page/3/",
        "/items/page/4/",
    ]
    index = injected[0]
    assert len(index.collection) == 10
    assert index.collection is result.state[""].collections["items"]
    assert [r.slug for r in result.state[""].collections["items/page"]] == ["2", "3", "4"]


def test_inject_categories(create):
    categories = ["a", "b", "c", "b", "b", "c", "a", "d", "c", "c"]
    files = [
        create(f"items/{i:02d}.yml", {"category": c}) for i, c in enumerate(categories, 1)
    ]

    def by_category(state, options):
        items = sorted(state[""].collections["items"], key=lambda r: r.category)
        return [
            make_file(f"items/category/{key}.yml", {"category": key, "count": len(list(group))})
            for key, group in groupby(items, key=lambda r: r.category)
        ]

    result = graph(files, inject=by_category)
    injected = result.resources[10:]
    assert [(r.category, r.count) for r in injected] == [("a", 2), ("b", 3), ("c", 4), ("d", 1)]
    assert injected[0].path == "/items/category/a/"
    assert injected[0].filepath == BASE / "items" / "category" / "a" / "index.html"


def test_inject_multiple_times(create):
    keywords = ["a", "b", "c", "d", "d", "d", "b", "c", "a", "c"]
    files = [create("index.yml", {})]
    files += [create(f"items/{i:02d}.yml", {"keyword": k}) for i, k in enumerate(keywords, 1)]
    files += [create(f"pages/{i:02d}.yml", {"keyword": k}) for i, k in enumerate("acdcb", 1)]

    def keyword_pages(state, options):
        tagged = sorted((p for p in state[""].pages if "keyword" in p), key=lambda r: r.keyword)
        return [
            make_file(f"keyword/{key}.yml", {"keyword": key, "count": len(list(group))})
            for key, group in groupby(tagged, key=lambda r: r.keyword)
        ]

    def keyword_index(state, options):
        pages = chunk(state[""].collections["keyword"], 3)
        return [
            make_file(
                "keyword/index.yml" if i == 0 else f"keyword/page/{i + 1}.yml",
                {"offset": i * 3},
            )
            for i, _ in enumerate(pages)
        ]

    result = graph(files, inject=[keyword_pages, keyword_index])
    assert len(result.resources) == 22
    assert result.resources[16].keyword == "a"
    assert result.resources[16].path == "/keyword/a/"
    assert result.resources[20].offset == 0
    assert result.resources[20].path == "/keyword/"
    assert result.resources[21].path == "/keyword/page/2/"
    assert [r.count for r in result.resources[20].collection] == [3, 3, 5, 4]


def test_injector_sees_earlier_passes_only(create):
    seen = []

    def first(state, options):
        seen.append(len(state[""].pages))
        return [make_file("extra/one.yml", {})]

    def second(state, options):
        seen.append(len(state[""].pages))
        return []

    result = graph([create("a.yml", {}), create("b.yml", {})], inject=[first, second])
    assert seen == [2, 3]
    assert len(result.resources) == 3


def test_injected_siblings_relink_existing_collection(create):
    def more(state, options):
        return [make_file("items/#2.middle.yml", {})]

    result = graph(
        [create("items/#1.first.yml", {}), create("items/#3.last.yml", {})], inject=more
    )
    first, last, middle = result.resources
    assert first.next is middle
    assert middle.prev is first and middle.next is last
    assert last.prev is middle


def test_injected_translation_joins_existing_group(create):
    def translate(state, options):
        return make_file("hello.ja.yml", {"title": "Ja"})

    result = graph([create("hello.yml", {"title": "En"})], locales=["ja"], inject=translate)
    en, ja = result.resources
    assert en.locales is ja.locales
    assert en.locales["ja"] is ja


def test_async_injectors_run_in_sequence(create):
    async def later(state, options):
        await asyncio.sleep(0.01)
        return [make_file("hello.yml", {})]

    async def last(state, options):
        assert "hello" in state[""].references
        return [make_file("world.yml", {})]

    result = graph([create("index.yml", {})], inject=[later, last])
    assert [r.path for r in result.resources] == ["/", "/hello/", "/world/"]


def test_inject_single_file(create):
    result = graph([create("foo.yml", {})], inject=lambda state, options: make_file("bar.yml", {"title": "Bar"}))
    assert result.resources[1].title == "Bar"
    assert result.resources[1].path == "/bar/"


def test_inject_plain_mapping(create):
    result = graph(
        [create("foo.yml", {})],
        inject=lambda state, options: {"path": "bar.yml", "contents": "title: Bar"},
    )
    bar = result.resources[1]
    assert bar.title == "Bar"
    assert bar.path == "/bar/"
    assert bar.filepath == BASE / "bar" / "index.html"


def test_inject_empty_list(create):
    result = graph([create("foo.yml", {})], inject=lambda state, options: [])
    assert len(result.resources) == 1


@pytest.mark.parametrize("value", ["invalid value", None, 42, [make_file("ok.yml", {}), 1], {"contents": "x"}])
def test_inject_invalid_value(create, value):
    with pytest.raises(InvalidInjectionError):
        graph([create("foo.yml", {})], inject=lambda state, options: value)


@pytest.mark.parametrize("path", ["/elsewhere/x.yml", "../x.yml", "items/../../x.yml"])
def test_inject_mapping_outside_base(create, path):
    with pytest.raises(InvalidInjectionError):
        graph([create("foo.yml", {})], inject=lambda state, options: {"path": path, "contents": "a: 1"})


def test_inject_absolute_mapping_below_base(create):
    result = graph(
        [create("foo.yml", {})],
        inject=lambda state, options: {"path": str(BASE / "bar.yml"), "contents": "a: 1"},
    )
    assert result.resources[1].path == "/bar/"


def test_injected_collision_is_fatal(create):
    with pytest.raises(PathCollisionError) as excinfo:
        graph([create("foo.yml", {})], inject=lambda state, options: make_file("foo.json", body="{}"))
    assert "foo.yml" in str(excinfo.value)
    assert "foo.json" in str(excinfo.value)


def test_options_base_for_injected_mappings():
    result = asyncio.run(
        build_graph(
            [],
            Options(
                base=BASE,
                inject=lambda state, options: {"path": "hello.yml", "contents": ""},
            ),
        )
    )
    assert result.resources[0].filepath == BASE / "hello" / "index.html"


# resource factories
# ==================


def test_custom_factory_function(create):
    def factory(file, options):
        resource = build_resource(file, options)
        resource.attributes["bar"] = "Bar"
        return resource

    result = graph([create("foo.yml", {"title": "Foo"})], resource_factory=factory)
    assert result.resources[0].bar == "Bar"
    assert result.resources[0].title == "Foo"


def test_async_factory(create):
    async def factory(file, options):
        await asyncio.sleep(0)
        return build_resource(file, options)

    result = graph([create("foo.yml", {}), create("bar.yml", {})], resource_factory=factory)
    assert [r.slug for r in result.resources] == ["foo", "bar"]


def test_resource_transforms(create):
    def shout(resource):
        resource.attributes["loud"] = resource.get("title", "").upper()
        return resource

    result = graph([create("foo.yml", {"title": "Foo"})], resource_transforms=[shout])
    assert result.resources[0].loud == "FOO"


def test_invalid_factory():
    with pytest.raises(ConfigurationError):
        ResourceGraphBuilder(Options(resource_factory="model"))


def test_factory_must_return_resource(create):
    with pytest.raises(ConfigurationError) as excinfo:
        graph([create("foo.yml", {})], resource_factory=lambda file, options: object())
    assert excinfo.value.source_path == "foo.yml"


def test_builder_passes_directly(create):
    builder = ResourceGraphBuilder(Options())
    asyncio.run(builder.add_pass([create("items/b.yml", {})]))
    asyncio.run(builder.add_pass([SourceFile.from_relative(BASE, "items/a.yml", "{}")]))
    items = builder.state[""].collections["items"]
    assert [r.slug for r in items] == ["a", "b"]
    assert items[0].next is items[1]
    assert len(builder.resources) == 2
