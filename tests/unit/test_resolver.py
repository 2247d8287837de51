# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for declaration merging and symbol tree construction."""

from tsdecl import build_symbol_tree
from tsdecl.model import Symbol, SymbolTree
from tsdecl.parser import parse
from tsdecl.resolver import SymbolResolver


def _tree(*sources: tuple[str, str]) -> tuple[SymbolTree, list]:
    asts = []
    for file_name, source in sources:
        ast, diagnostics = parse(source, file_name)
        assert diagnostics == []
        asts.append(ast)
    return build_symbol_tree(asts)


def _single(source: str) -> tuple[SymbolTree, list]:
    return _tree(("main.ts", source))


def _names(symbols: list[Symbol]) -> list[str]:
    return [symbol.name for symbol in symbols]


def test_res_001_empty_or_comment_only_source_yields_empty_tree() -> None:
    for source in ("", "// nothing here\n/* still nothing */\n/** doc */"):
        tree, diagnostics = _single(source)

        assert tree.is_empty
        assert tree.symbols == []
        assert diagnostics == []


def test_res_002_overloads_fold_into_one_function_symbol() -> None:
    tree, diagnostics = _single(
        "\n".join(
            [
                "function f(x: string): string;",
                "function f(x: number): number;",
                "function f(x: boolean): boolean;",
                "function f(x: string | number | boolean): string | number | boolean {",
                "    return x;",
                "}",
            ]
        )
    )

    assert diagnostics == []
    assert len(tree.symbols) == 1
    symbol = tree.symbols[0]
    assert symbol.kind == "function"
    assert len(symbol.signatures) == 3
    assert symbol.has_implementation
    assert str(symbol.implementation) == "(x: string | number | boolean): string | number | boolean"
    assert len(symbol.locations) == 4


def test_res_003_single_function_keeps_its_implementation_signature() -> None:
    tree, _ = _single("function g<T>(param: T): T { return param; }")

    symbol = tree.find("g")
    assert symbol is not None
    assert symbol.signatures == [symbol.implementation]
    assert [t.name for t in symbol.type_parameters] == ["T"]


def test_res_004_interface_declarations_merge_members_in_order() -> None:
    tree, diagnostics = _single(
        "interface X { a: string }\nlet between = 1;\ninterface X { b: number }"
    )

    assert diagnostics == []
    assert _names(tree.symbols) == ["X", "between"]
    merged = tree.find("X", "interface")
    assert _names(merged.members) == ["a", "b"]
    assert not merged.has_implementation


def test_res_005_constructor_parameter_properties_are_promoted() -> None:
    tree, diagnostics = _single(
        "\n".join(
            [
                "class A {",
                "    methodFirst() {}",
                "    constructor(",
                "        public publicProp: string,",
                "        private privateProp: number,",
                "        normalParam: any",
                "    ) {}",
                "    methodLast() {}",
                "}",
            ]
        )
    )

    assert diagnostics == []
    members = tree.find("A").members
    assert [(m.kind, m.name) for m in members] == [
        ("method", "methodFirst"),
        ("constructor", "constructor"),
        ("property", "publicProp"),
        ("property", "privateProp"),
        ("method", "methodLast"),
    ]
    promoted = [m for m in members if m.kind == "property"]
    assert promoted[0].modifiers == frozenset({"public"})
    assert promoted[1].modifiers == frozenset({"private"})
    assert str(promoted[1].type) == "number"
    assert tree.find("A").member("normalParam") is None


def test_res_006_readonly_parameter_is_promoted_and_duplicates_are_reported() -> None:
    tree, diagnostics = _single(
        "class P {\n    id: number;\n    constructor(readonly id: number, readonly tag: string) {}\n}"
    )

    cls = tree.find("P")
    assert [(m.kind, m.name) for m in cls.members] == [
        ("property", "id"),
        ("constructor", "constructor"),
        ("property", "tag"),
    ]
    assert len(diagnostics) == 1
    assert diagnostics[0].code == "merge"
    assert "Duplicate identifier 'id'" in diagnostics[0].message
    assert cls.members[0].diagnostics == diagnostics


def test_res_007_get_and_set_accessors_pair_into_one_symbol() -> None:
    tree, diagnostics = _single(
        "\n".join(
            [
                "class PropertyExamples {",
                "    get fullName(): string { return ''; }",
                "    set fullName(value: string) {}",
                "    get onlyGetter(): number { return 1; }",
                "}",
            ]
        )
    )

    assert diagnostics == []
    accessors = [m for m in tree.find("PropertyExamples").members if m.kind == "accessor"]
    assert _names(accessors) == ["fullName", "onlyGetter"]
    full_name = accessors[0]
    assert full_name.get_signature is not None
    assert full_name.set_signature is not None
    assert str(full_name.get_signature.return_type) == "string"
    assert accessors[1].set_signature is None


def test_res_008_decorators_are_kept_in_source_order() -> None:
    tree, _ = _single(
        'class DecoratedProps {\n    @validate\n    @transform\n    decoratedProp: string = "test";\n}'
    )

    prop = tree.find("DecoratedProps").member("decoratedProp")
    assert [(d.expression, d.invoked, d.arguments) for d in prop.decorators] == [
        ("validate", False, None),
        ("transform", False, None),
    ]
    assert prop.has_implementation


def test_res_009_duplicate_non_mergeable_declaration_is_rejected() -> None:
    tree, diagnostics = _single(
        "const MySymbol: unique symbol;\nclass K {}\ndeclare const MySymbol: unique symbol;"
    )

    assert _names(tree.symbols) == ["MySymbol", "K"]
    assert len(diagnostics) == 1
    assert diagnostics[0].severity == "error"
    assert diagnostics[0].position.line == 3
    assert tree.symbols[0].diagnostics == diagnostics
    assert len(tree.symbols[0].locations) == 1


def test_res_010_overloads_without_implementation_are_a_conflict_outside_ambient_context() -> None:
    tree, diagnostics = _single("function lonely(x: string): void;\nfunction lonely(x: number): void;")

    symbol = tree.find("lonely")
    assert not symbol.has_implementation
    assert len(symbol.signatures) == 2
    assert [d.code for d in diagnostics] == ["merge"]
    assert "Implementation of 'lonely' is missing" in diagnostics[0].message


def test_res_011_ambient_overloads_need_no_implementation() -> None:
    tree, diagnostics = _single(
        "\n".join(
            [
                "declare function getWidget(n: number): Widget;",
                "declare function getWidget(s: string): Widget[];",
                "declare class Greeter {",
                "  constructor(greeting: string);",
                "  showGreeting(): void;",
                "}",
                "abstract class Shape {",
                "  abstract area(): number;",
                "}",
            ]
        )
    )

    assert diagnostics == []
    widget = tree.find("getWidget")
    assert widget.is_ambient
    assert "declared" in widget.modifiers
    assert len(widget.signatures) == 2
    assert not widget.has_implementation
    greeter = tree.find("Greeter")
    assert greeter.is_ambient
    assert not greeter.member("showGreeting").has_implementation
    assert not tree.find("Shape").member("area").has_implementation


def test_res_012_second_implementation_is_rejected_and_first_is_kept() -> None:
    tree, diagnostics = _single("function twice(a: string) {}\nfunction twice(b: number) {}")

    symbol = tree.find("twice")
    assert symbol.implementation.parameters[0].name == "a"
    assert len(diagnostics) == 1
    assert "Duplicate function implementation" in diagnostics[0].message


def test_res_013_incompatible_overload_arity_is_reported() -> None:
    tree, diagnostics = _single(
        "function pick(a: string, b: string, c: string): void;\nfunction pick(a: string) {}"
    )

    assert tree.find("pick").has_implementation
    assert len(diagnostics) == 1
    assert "not compatible" in diagnostics[0].message


def test_res_014_constructor_overloads_fold_and_promote_only_from_implementation() -> None:
    tree, diagnostics = _single(
        "\n".join(
            [
                "class ConstructorOverloads {",
                "    constructor(name: string);",
                "    constructor(id: number);",
                "    constructor(name: string, suffix: string);",
                "    constructor(nameOrId: string | number, suffix?: string) {}",
                "}",
            ]
        )
    )

    assert diagnostics == []
    members = tree.find("ConstructorOverloads").members
    assert len(members) == 1
    constructor = members[0]
    assert len(constructor.signatures) == 3
    assert constructor.has_implementation


def test_res_015_parameter_property_on_overload_is_a_warning() -> None:
    tree, diagnostics = _single(
        "class W {\n    constructor(private x: string);\n    constructor(x: any) {}\n}"
    )

    assert [(d.code, d.severity) for d in diagnostics] == [("merge", "warning")]
    assert tree.find("W").member("x") is None


def test_res_016_namespaces_merge_and_nest() -> None:
    tree, diagnostics = _single(
        "\n".join(
            [
                "namespace N {",
                "    export type A = string;",
                "    export namespace Inner { function deep(): void {} }",
                "}",
                "namespace N {",
                "    export const b = 1;",
                "}",
                "declare namespace GreetingLib.Options {",
                "    let numberOfGreetings: number;",
                "}",
            ]
        )
    )

    assert diagnostics == []
    assert _names(tree.symbols) == ["N", "GreetingLib"]
    namespace = tree.find("N", "namespace")
    assert _names(namespace.members) == ["A", "Inner", "b"]
    assert namespace.member("Inner").member("deep").has_implementation
    options = tree.find("GreetingLib").member("Options")
    assert options.is_ambient
    assert _names(options.members) == ["numberOfGreetings"]


def test_res_017_modules_and_global_augmentations_are_held_separately() -> None:
    tree, diagnostics = _tree(
        (
            "a.ts",
            'declare module "SomeModule" {\n  export function fn(): string;\n}\n'
            "declare global {\n  interface Window { first: string }\n}",
        ),
        (
            "b.ts",
            'declare module "SomeModule" {\n  interface Request { user?: string }\n}\n'
            "declare global {\n  interface Window { second: number }\n}",
        ),
    )

    assert diagnostics == []
    assert tree.symbols == []
    module = tree.modules["SomeModule"]
    assert _names(module.members) == ["fn", "Request"]
    assert [loc.file_name for loc in module.locations] == ["a.ts", "b.ts"]
    assert _names(tree.global_symbols) == ["Window"]
    assert _names(tree.global_symbols[0].members) == ["first", "second"]


def test_res_018_project_fold_merges_namespaces_but_keeps_file_scoped_symbols() -> None:
    tree, diagnostics = _tree(
        ("one.ts", "namespace Shared { export const a = 1; }\nconst local = 1;"),
        ("two.ts", "namespace Shared { export const b = 2; }\nconst local = 2;"),
    )

    assert diagnostics == []
    assert [(s.kind, s.name) for s in tree.symbols] == [
        ("namespace", "Shared"),
        ("variable", "local"),
        ("variable", "local"),
    ]
    assert _names(tree.find("Shared").members) == ["a", "b"]
    assert _names(tree.files["one.ts"][0].members) == ["a"]
    assert _names(tree.files["two.ts"][0].members) == ["b"]


def test_res_019_static_blocks_and_index_signatures_stay_distinct() -> None:
    tree, diagnostics = _single(
        "\n".join(
            [
                "class ClassIndexSignature {",
                "  [key: string]: any;",
                "  [index: number]: string;",
                "  static { }",
                "  static { }",
                "}",
            ]
        )
    )

    assert diagnostics == []
    members = tree.find("ClassIndexSignature").members
    assert [(m.kind, m.name) for m in members] == [
        ("index_signature", "[string]"),
        ("index_signature", "[number]"),
        ("static_initializer", ""),
        ("static_initializer", ""),
    ]
    assert members[0].signatures[0].role == "index"


def test_res_020_static_and_instance_members_with_same_name_do_not_merge() -> None:
    tree, diagnostics = _single("class S {\n  static create() {}\n  create() {}\n}")

    assert diagnostics == []
    members = tree.find("S").members
    assert len(members) == 2
    assert "static" in members[0].modifiers


def test_res_021_exported_symbol_count_matches_exported_declarations() -> None:
    source = "\n".join(
        [
            "export interface I { a: string }",
            "export interface I { b: string }",
            "export function f(): void;",
            "export function f(x?: number) {}",
            "export default class Main {}",
            "export type { I as J };",
            "const hidden = 1;",
        ]
    )
    ast, _ = parse(source, "exports.ts")
    tree, _ = SymbolResolver().build([ast])

    exported_keys = {(d.name, d.kind) for d in ast.declarations if d.is_exported}
    assert len([s for s in tree.symbols if s.is_exported]) == len(exported_keys) == 3


def test_res_022_interface_merge_with_different_type_parameters_warns() -> None:
    tree, diagnostics = _single("interface G<T> { a: T }\ninterface G<U> { b: U }")

    assert _names(tree.find("G").members) == ["a", "b"]
    assert [d.severity for d in diagnostics] == ["warning"]


def test_res_023_global_block_inside_module_augmentation_reaches_global_scope() -> None:
    tree, diagnostics = _single(
        'export {};\ndeclare module "m" {\n  global {\n    interface W { a: string }\n  }\n'
        "  export function helper(): void;\n}\n"
    )

    assert diagnostics == []
    assert _names(tree.global_symbols) == ["W"]
    assert _names(tree.global_symbols[0].members) == ["a"]
    assert _names(tree.modules["m"].members) == ["helper"]


def test_res_024_namespace_overloads_and_implementation_from_different_files() -> None:
    tree, diagnostics = _tree(
        ("a.ts", "namespace N { export function f(x: string): void; }"),
        ("b.ts", "namespace N { export function f(x: string) {} }"),
    )

    assert diagnostics == []
    function = tree.find("N").member("f")
    assert function.has_implementation
    assert [s.has_body for s in function.signatures] == [False]
    assert function.implementation.has_body
    assert function.diagnostics == []
    overload_only = tree.files["a.ts"][0].member("f")
    assert not overload_only.has_implementation
    assert overload_only.diagnostics == []


def test_res_025_namespace_implementation_missing_in_every_file_is_reported_once() -> None:
    tree, diagnostics = _tree(
        ("a.ts", "namespace N { export function f(x: string): void; }"),
        ("b.ts", "namespace N { export function f(x: number): void; }"),
    )

    function = tree.find("N").member("f")
    assert len(function.signatures) == 2
    assert len(diagnostics) == 1
    assert "Implementation of 'f' is missing" in diagnostics[0].message
    assert function.diagnostics == diagnostics


def test_res_026_walk_visits_symbols_modules_and_globals_depth_first() -> None:
    tree, _ = _single(
        "namespace Outer {\n  export class Inner { run() {} }\n}\n"
        'declare module "ext" {\n  const flag: boolean;\n}\n'
        "declare global {\n  interface Window { custom: string }\n}\n"
    )

    assert [(s.kind, s.name) for s in tree.walk()] == [
        ("namespace", "Outer"),
        ("class", "Inner"),
        ("method", "run"),
        ("namespace", "ext"),
        ("variable", "flag"),
        ("interface", "Window"),
        ("property", "custom"),
    ]
