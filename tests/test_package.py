import io

import pytest

from protoc_gunk.models import Builder, ConvertError
from protoc_gunk.parser.proto_ast import Comment, Import, Literal, Option, Package, Position
from protoc_gunk.translator.package import FILE_OPTIONS, handle_imports, handle_package


def _builder(pkg: str = "util") -> Builder:
    b = Builder(filename="test.proto", warnings=io.StringIO())
    b.pkg = Package(name=pkg)
    return b


def _option(name: str, value: str, is_string: bool = False, **kwargs) -> Option:
    return Option(name=name, constant=Literal(source=value, is_string=is_string), **kwargs)


class TestHandlePackage:
    def test_plain_package(self):
        b = _builder()
        assert handle_package(b) == "package util"
        assert b.imports_used == {}

    def test_package_comment(self):
        b = _builder()
        b.pkg.comment = Comment(lines=[" Package util does things."])
        assert handle_package(b) == "// Package util does things.\npackage util"

    def test_go_package_is_trailing_comment(self):
        b = _builder()
        b.pkg_opts.append(_option("go_package", "github.com/example/util", is_string=True))
        assert handle_package(b) == "package util // proto github.com/example/util"
        assert b.imports_used == {}

    def test_go_package_comment(self):
        b = _builder()
        b.pkg_opts.append(_option("go_package", "x", is_string=True, comment=Comment(lines=[" Go."])))
        assert handle_package(b) == "// Go.\npackage util // proto x"

    def test_empty_go_package(self):
        b = _builder()
        b.pkg_opts.append(_option("go_package", "", is_string=True))
        assert handle_package(b) == "package util"

    @pytest.mark.parametrize("name, value, is_string, annotation, impt", [
        ("deprecated", "true", False, "file.Deprecated(true)", "github.com/gunk/opt/file"),
        ("optimize_for", "SPEED", False, "file.OptimizeFor(SPEED)", "github.com/gunk/opt/file"),
        ("java_package", "com.example", True, 'java.Package("com.example")', "github.com/gunk/opt/file/java"),
        ("java_outer_classname", "Util", True, 'java.OuterClassname("Util")', "github.com/gunk/opt/file/java"),
        ("java_multiple_files", "true", False, "java.MultipleFiles(true)", "github.com/gunk/opt/file/java"),
        ("java_string_check_utf8", "false", False, "java.StringCheckUtf8(false)", "github.com/gunk/opt/file/java"),
        ("java_generic_services", "true", False, "java.GenericServices(true)", "github.com/gunk/opt/file/java"),
        ("swift_prefix", "UT", True, 'swift.Prefix("UT")', "github.com/gunk/opt/file/swift"),
        ("csharp_namespace", "Example.Util", True, 'csharp.Namespace("Example.Util")', "github.com/gunk/opt/file/csharp"),
        ("objc_class_prefix", "UTL", True, 'objc.ClassPrefix("UTL")', "github.com/gunk/opt/file/objc"),
        ("php_generic_services", "true", False, "php.GenericServices(true)", "github.com/gunk/opt/file/php"),
        ("cc_generic_services", "false", False, "cc.GenericServices(false)", "github.com/gunk/opt/file/cc"),
        ("cc_enable_arenas", "true", False, "cc.EnableArenas(true)", "github.com/gunk/opt/file/cc"),
    ])
    def test_file_options(self, name, value, is_string, annotation, impt):
        b = _builder()
        b.pkg_opts.append(_option(name, value, is_string=is_string))
        assert handle_package(b) == f"// +gunk {annotation}\npackage util"
        assert list(b.imports_used) == [impt]

    def test_every_option_is_covered(self):
        assert len(FILE_OPTIONS) == 13

    def test_annotations_keep_declaration_order(self):
        b = _builder()
        b.pkg.comment = Comment(lines=[" Util."])
        b.pkg_opts.extend([
            _option("java_package", "com.example", is_string=True),
            _option("go_package", "example.com/util", is_string=True),
            _option("deprecated", "true"),
        ])
        assert handle_package(b) == (
            '// +gunk java.Package("com.example")\n'
            "// +gunk file.Deprecated(true)\n"
            "// Util.\n"
            "package util // proto example.com/util"
        )
        assert set(b.imports_used) == {"github.com/gunk/opt/file/java", "github.com/gunk/opt/file"}

    def test_unknown_option_is_fatal(self):
        b = _builder()
        b.pkg_opts.append(_option("totally_custom_option", "true", position=Position(5, 1)))
        with pytest.raises(ConvertError) as exc:
            handle_package(b)
        assert str(exc.value) == 'test.proto:5:1: "totally_custom_option" is an unhandled proto file option'
        assert exc.value.position == Position(5, 1)

    def test_missing_package_is_fatal(self):
        b = Builder(filename="test.proto")
        with pytest.raises(ConvertError, match="missing package declaration"):
            handle_package(b)


class TestHandleImports:
    def test_nothing_to_import(self):
        assert handle_imports(_builder()) == ""

    def test_proto_imports_are_comments(self):
        b = _builder()
        b.imports.extend([Import(filename="google/api/annotations.proto"), Import(filename="other.proto")])
        assert handle_imports(b) == (
            "import (\n"
            '\t// "google/api/annotations.proto"\n'
            '\t// "other.proto"\n'
            ")"
        )

    def test_required_imports(self):
        b = _builder()
        b.imports_used["github.com/gunk/opt/http"] = True
        b.imports.append(Import(filename="other.proto"))
        block = handle_imports(b)
        assert block.startswith("import (\n")
        assert block.endswith("\n)")
        lines = block.splitlines()[1:-1]
        assert sorted(lines) == sorted(['\t"github.com/gunk/opt/http"', '\t// "other.proto"'])
