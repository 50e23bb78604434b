"""Tests for the in-memory symbol index and graph documents."""

import json

import pytest

from declsite.core.errors import DeclsiteError, InvalidGraphDocumentError, MissingConfigError
from declsite.symbols.memory import MemorySymbolIndex, quote_name
from declsite.symbols.protocols import Category, SymbolIndex


class TestQuoteName:
    @pytest.mark.parametrize("name", ["std", "_private", "ArrayList2"])
    def test_identifiers_unchanged(self, name):
        assert quote_name(name) == name

    @pytest.mark.parametrize("name,expected", [("a.b", '@"a.b"'), ("2d", '@"2d"'), ("x y", '@"x y"')])
    def test_other_names_quoted(self, name, expected):
        assert quote_name(name) == expected


class TestBuilder:
    def test_satisfies_protocol(self, sample_index):
        assert isinstance(sample_index, SymbolIndex)

    def test_fqn_and_parent(self, sample_index):
        copy = sample_index.find_by_fqn("std.mem.copy")
        mem = sample_index.find_by_fqn("std.mem")
        assert copy is not None
        assert sample_index.name(copy) == "copy"
        assert sample_index.fqn(copy) == "std.mem.copy"
        assert sample_index.parent(copy) == mem
        assert sample_index.parent(sample_index.root_declaration()) is None

    def test_quoted_segment_in_fqn(self):
        index = MemorySymbolIndex()
        root = index.add("root", Category.NAMESPACE)
        odd = index.add("odd.name", Category.GLOBAL_CONST, parent=root)
        assert index.fqn(odd) == 'root.@"odd.name"'

    def test_duplicate_fqn_rejected(self):
        index = MemorySymbolIndex()
        root = index.add("root", Category.NAMESPACE)
        index.add("x", Category.FUNCTION, parent=root)
        with pytest.raises(InvalidGraphDocumentError):
            index.add("x", Category.TYPE, parent=root)

    def test_private_members_hidden_by_default(self, sample_index):
        std = sample_index.root_declaration()
        names = [sample_index.name(m) for m in sample_index.members(std)]
        assert names == ["mem", "Alloc", "max_int"]
        with_private = [sample_index.name(m) for m in sample_index.members(std, True)]
        assert with_private == ["mem", "Alloc", "max_int", "_internal"]

    def test_category_name_defaults_to_label(self, sample_index):
        alloc = sample_index.find_by_fqn("std.mem.Allocator.alloc")
        assert sample_index.category_name(alloc) == "function"

    def test_custom_label(self):
        index = MemorySymbolIndex()
        root = index.add("root", Category.NAMESPACE, label="module")
        assert index.category_name(root) == "module"

    def test_unknown_integer_category_is_kept(self):
        index = MemorySymbolIndex()
        root = index.add("root", Category.NAMESPACE)
        weird = index.add("weird", 99, parent=root)
        assert index.classify(weird) == 99

    def test_category_by_name(self):
        index = MemorySymbolIndex()
        decl = index.add("T", "type-function")
        assert index.classify(decl) == Category.TYPE_FUNCTION

    def test_unknown_category_name_rejected(self):
        with pytest.raises(InvalidGraphDocumentError):
            MemorySymbolIndex().add("T", "gadget")

    def test_alias_target(self, sample_index):
        alias = sample_index.find_by_fqn("std.Alloc")
        assert sample_index.classify(alias) == Category.ALIAS
        assert sample_index.alias_target(alias) == sample_index.find_by_fqn("std.mem.Allocator")

    def test_alias_target_of_non_alias(self, sample_index):
        with pytest.raises(DeclsiteError):
            sample_index.alias_target(sample_index.root_declaration())

    def test_find_file_root(self, sample_index):
        assert sample_index.find_file_root("mem.zig") == sample_index.find_by_fqn("std.mem")
        assert sample_index.find_file_root("nope.zig") is None


class TestFragments:
    def test_params_and_errors(self, sample_index):
        copy = sample_index.find_by_fqn("std.mem.copy")
        params = sample_index.params(copy)
        assert [sample_index.param_html(copy, p) for p in params] == ["<code>dest</code>", "<code>src</code>"]
        assert sample_index.error_set(copy) == []

        alloc = sample_index.find_by_fqn("std.mem.Allocator.alloc")
        (error,) = sample_index.error_set(alloc)
        assert sample_index.error_html(alloc, error) == "<dt>OutOfMemory</dt>"

    def test_short_docs(self, sample_index):
        mem = sample_index.find_by_fqn("std.mem")
        assert sample_index.docs_html(mem) == "<p>Memory utilities.</p>"
        assert sample_index.docs_html(mem, short=True) == "<p>Memory.</p>"

    def test_empty_fragments(self, sample_index):
        max_int = sample_index.find_by_fqn("std.max_int")
        assert sample_index.fn_proto_html(max_int) == ""
        assert sample_index.source_html(max_int) == ""
        assert sample_index.doctest_html(max_int) == ""
        assert sample_index.fields(max_int) == []

    def test_type_function_fields_follow_plain_fields(self):
        index = MemorySymbolIndex()
        tf = index.add("List", Category.TYPE_FUNCTION, fields=["<p>a</p>"], type_fn_fields=["<p>b</p>", "<p>c</p>"])
        assert index.fields(tf) == [0]
        assert index.type_function_fields(tf) == [1, 2]
        assert [index.field_html(tf, f) for f in index.type_function_fields(tf)] == ["<p>b</p>", "<p>c</p>"]


class TestLifecycle:
    def test_closed_index_rejects_queries(self, sample_index):
        sample_index.close()
        with pytest.raises(DeclsiteError):
            sample_index.fqn(0)
        with pytest.raises(DeclsiteError):
            sample_index.find_by_fqn("std")

    def test_unknown_handle(self, sample_index):
        with pytest.raises(DeclsiteError):
            sample_index.name(1000)

    @pytest.mark.parametrize("decl", [-1, -8])
    def test_negative_handle_rejected(self, sample_index, decl):
        with pytest.raises(DeclsiteError, match="Unknown declaration handle"):
            sample_index.fqn(decl)

    def test_empty_index_has_no_root(self):
        with pytest.raises(InvalidGraphDocumentError):
            MemorySymbolIndex().root_declaration()


class TestGraphDocuments:
    def test_from_dict(self, sample_tree):
        index = MemorySymbolIndex.from_dict(sample_tree)
        assert len(index) == 8
        alias = index.find_by_fqn("std.Alloc")
        assert index.alias_target(alias) == index.find_by_fqn("std.mem.Allocator")
        assert index.find_file_root("std.zig") == index.root_declaration()

    def test_alias_may_point_forward(self):
        index = MemorySymbolIndex.from_dict({
            "name": "root",
            "category": "namespace",
            "members": [
                {"name": "A", "category": "alias", "alias": "root.B"},
                {"name": "B", "category": "type"},
            ],
        })
        assert index.alias_target(index.find_by_fqn("root.A")) == index.find_by_fqn("root.B")

    def test_ref_adds_containment_edge(self):
        index = MemorySymbolIndex.from_dict({
            "name": "root",
            "category": "namespace",
            "members": [
                {"name": "T", "category": "type", "members": [{"ref": "root.T"}]},
            ],
        })
        t = index.find_by_fqn("root.T")
        assert index.members(t) == [t]
        assert index.parent(t) == index.root_declaration()

    def test_type_function_members(self):
        index = MemorySymbolIndex.from_dict({
            "name": "root",
            "category": "namespace",
            "members": [
                {
                    "name": "List",
                    "category": "type_function",
                    "type_fn_members": [{"name": "append", "category": "function"}],
                },
            ],
        })
        tf = index.find_by_fqn("root.List")
        append = index.find_by_fqn("root.List.append")
        assert index.type_function_members(tf) == [append]
        assert index.members(tf) == []

    @pytest.mark.parametrize(
        "tree",
        [
            {"name": "root"},
            {"name": "root", "category": "namespace", "colour": "red"},
            {"name": "root", "category": "namespace", "members": ["not a mapping"]},
            {"name": "root", "category": "namespace", "members": [{"name": "A", "category": "alias", "alias": "root.missing"}]},
            {"name": "root", "category": "namespace", "members": [{"ref": "root.missing"}]},
        ],
    )
    def test_invalid_documents(self, tree):
        with pytest.raises(InvalidGraphDocumentError):
            MemorySymbolIndex.from_dict(tree)

    def test_from_yaml_file(self, graph_file):
        index = MemorySymbolIndex.from_file(graph_file)
        assert index.fqn(index.root_declaration()) == "std"

    def test_from_json_file(self, tmp_path, sample_tree):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(sample_tree), encoding="utf-8")
        index = MemorySymbolIndex.from_file(path)
        assert index.find_by_fqn("std.mem.Allocator.alloc") is not None

    def test_missing_file(self, tmp_path):
        with pytest.raises(MissingConfigError):
            MemorySymbolIndex.from_file(tmp_path / "nope.yaml")

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- std\n", encoding="utf-8")
        with pytest.raises(InvalidGraphDocumentError):
            MemorySymbolIndex.from_file(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: [unclosed\n", encoding="utf-8")
        with pytest.raises(InvalidGraphDocumentError):
            MemorySymbolIndex.from_file(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidGraphDocumentError):
            MemorySymbolIndex.from_file(path)

    def test_empty_yaml_keys_count_as_none(self, tmp_path):
        path = tmp_path / "sparse.yaml"
        path.write_text(
            "name: root\ncategory: namespace\ndocs:\nfields:\nmembers:\n"
            "  - name: f\n    category: function\n    params:\n    errors:\n",
            encoding="utf-8",
        )
        index = MemorySymbolIndex.from_file(path)
        root = index.root_declaration()
        f = index.find_by_fqn("root.f")
        assert index.fields(root) == []
        assert index.docs_html(root) == ""
        assert index.params(f) == []
        assert index.error_set(f) == []

    @pytest.mark.parametrize("key", ["fields", "params", "members"])
    def test_non_list_values_rejected(self, key):
        with pytest.raises(InvalidGraphDocumentError):
            MemorySymbolIndex.from_dict({"name": "root", "category": "namespace", key: "oops"})
