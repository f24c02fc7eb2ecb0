"""Tests for the C# source emitter."""
from archgen.generators.cqrs_gen.emitter import SourceFile, emit


def test_emit_layout():
    """Usings, file-scoped namespace and members separated by blank lines."""
    source = SourceFile(namespace="Shop.Domain")
    source.use("System", "System", "Shop.Domain")
    decl = source.declare("public class Widget", attributes=["Serializable"])
    decl.member().line("public int Id { get; set; }")
    method = decl.member()
    with method.braces("public void Touch()"):
        method.line("Id++;")

    assert emit(source) == (
        "using System;\n"
        "\n"
        "namespace Shop.Domain;\n"
        "\n"
        "[Serializable]\n"
        "public class Widget\n"
        "{\n"
        "    public int Id { get; set; }\n"
        "\n"
        "    public void Touch()\n"
        "    {\n"
        "        Id++;\n"
        "    }\n"
        "}\n"
    )


def test_bodyless_record_and_empty_members():
    source = SourceFile(namespace="Shop")
    decl = source.declare("public record Ping(int Id)", bodyless=True)
    decl.member()
    assert emit(source) == "namespace Shop;\n\npublic record Ping(int Id);\n"
