import json
import logging

import pytest
from conftest import EMPTY_MESSAGE, binary_request, file_node, interface_node, simple_request

from capnpc_grpc_cpp.pipeline import (
    DriverState,
    FileText,
    PluginConfig,
    PluginError,
    PluginGenerator,
    TextTree,
    UnresolvedReferenceError,
    empty_render,
)
from capnpc_grpc_cpp.pipeline.errors import FilesystemError, MalformedRequestError
from capnpc_grpc_cpp.pipeline.output import FileWriter, ensure_parent_directory
from capnpc_grpc_cpp.pipeline.schema_ast.nodes import (
    CodeGeneratorRequest,
    Method,
    NestedNode,
    ProtocolVersion,
    RequestedFile,
)


def echo_render(schema, requested_file):
    """Render hook writing the display name into both files."""
    return FileText(
        header=TextTree.of("// header for ", schema.display_name, "\n"),
        source=TextTree.of("// source for ", schema.display_name, "\n"),
    )


class RecordingRender:
    def __init__(self):
        self.calls = []

    def __call__(self, schema, requested_file):
        self.calls.append(requested_file.id)
        return echo_render(schema, requested_file)


class RecordingWriter(FileWriter):
    def __init__(self, events):
        super().__init__()
        self.events = events

    def write(self, path, tree):
        super().write(path, tree)
        self.events.append(("write", str(path)))


class TestPluginGenerator:
    def test_writes_two_files_per_requested_file(self, chdir_tmp):
        events = []

        def materialize(path):
            ensure_parent_directory(path)
            events.append(("mkdir", str(path)))

        generator = PluginGenerator(render=echo_render, writer=RecordingWriter(events), materialize=materialize)
        written = generator.run(simple_request("a.capnp", "sub/b.capnp", "sub/deeper/c.capnp"))

        assert len(written) == 6
        assert written == [
            "a.capnp.h",
            "a.capnp.c++",
            "sub/b.capnp.h",
            "sub/b.capnp.c++",
            "sub/deeper/c.capnp.h",
            "sub/deeper/c.capnp.c++",
        ]
        # Every write is directly preceded by materializing its own parent
        assert len(events) == 12
        for mkdir_event, write_event in zip(events[::2], events[1::2]):
            assert mkdir_event == ("mkdir", write_event[1])
        assert (chdir_tmp / "sub" / "deeper" / "c.capnp.c++").read_text() == "// source for sub/deeper/c.capnp\n"
        assert generator.state == DriverState.DONE

    def test_render_is_called_once_per_file_in_request_order(self, chdir_tmp):
        render = RecordingRender()
        request = simple_request("z.capnp", "a.capnp", "m.capnp")

        PluginGenerator(render=render).run(request)

        assert render.calls == [rf.id for rf in request.requested_files]

    def test_version_mismatch_still_emits_everything(self, chdir_tmp, caplog):
        request = simple_request("Foo", version=ProtocolVersion(0, 9, 0))

        with caplog.at_level(logging.WARNING):
            generator = PluginGenerator(render=echo_render)
            written = generator.run(request)

        assert written == ["Foo.h", "Foo.c++"]
        assert (chdir_tmp / "Foo.h").exists()
        assert (chdir_tmp / "Foo.c++").exists()
        assert generator.version_mismatch is not None
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1

    def test_unversioned_compiler_is_accepted(self, chdir_tmp):
        generator = PluginGenerator(render=empty_render)
        generator.run(simple_request("a.capnp", version=None))

        assert generator.version_mismatch.compiler_version_text == "pre-0.6"
        assert (chdir_tmp / "a.capnp.h").read_text() == ""

    def test_missing_id_aborts_remaining_files_without_rollback(self, chdir_tmp):
        # The second file's interface refers to parameter struct 42, which is not in the request
        request = simple_request("first.capnp")
        request.nodes.append(file_node(200, "second.capnp", nested=(NestedNode("Svc", 201),)))
        request.nodes.append(interface_node(201, "second.capnp:Svc", 200, methods=(Method("call", 0, 42, 43),)))
        request.nodes.append(file_node(300, "third.capnp"))
        request.requested_files += [RequestedFile(200, "second.capnp"), RequestedFile(300, "third.capnp")]

        generator = PluginGenerator(config=PluginConfig())
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            generator.run(request)

        assert exc_info.value.node_id == 42
        assert generator.state == DriverState.FAILED
        assert (chdir_tmp / "first.capnp.h").exists()
        assert (chdir_tmp / "first.capnp.c++").exists()
        assert not (chdir_tmp / "second.capnp.h").exists()
        assert not (chdir_tmp / "third.capnp.h").exists()

    def test_missing_id_in_first_file_writes_nothing(self, chdir_tmp):
        request = CodeGeneratorRequest(
            compiler_version=ProtocolVersion(1, 0, 0),
            nodes=[
                file_node(1, "svc.capnp", nested=(NestedNode("Svc", 2),)),
                interface_node(2, "svc.capnp:Svc", 1, methods=(Method("call", 0, 42, 43),)),
            ],
            requested_files=[RequestedFile(1, "svc.capnp")],
        )

        with pytest.raises(UnresolvedReferenceError):
            PluginGenerator().run(request)

        assert list(chdir_tmp.iterdir()) == []

    def test_requested_file_not_in_nodes(self, chdir_tmp):
        request = simple_request("a.capnp")
        request.requested_files.append(RequestedFile(999, "ghost.capnp"))

        with pytest.raises(UnresolvedReferenceError, match="ghost.capnp"):
            PluginGenerator(render=echo_render).run(request)

    def test_duplicate_display_names_last_write_wins(self, chdir_tmp):
        request = CodeGeneratorRequest(
            compiler_version=ProtocolVersion(1, 0, 0),
            nodes=[file_node(1, "A::B"), file_node(2, "A::B")],
            requested_files=[RequestedFile(1, "one.capnp"), RequestedFile(2, "two.capnp")],
        )

        def render(schema, requested_file):
            return FileText(TextTree.of(requested_file.filename), TextTree.of(requested_file.filename))

        written = PluginGenerator(render=render).run(request)

        assert written == ["A::B.h", "A::B.c++", "A::B.h", "A::B.c++"]
        assert sorted(p.name for p in chdir_tmp.iterdir()) == ["A::B.c++", "A::B.h"]
        assert (chdir_tmp / "A::B.h").read_text() == "two.capnp"

    def test_render_errors_propagate_unchanged(self, chdir_tmp):
        class Boom(Exception):
            pass

        def render(schema, requested_file):
            raise Boom("template failed")

        generator = PluginGenerator(render=render)
        with pytest.raises(Boom, match="template failed"):
            generator.run(simple_request("a.capnp"))

        assert generator.state == DriverState.FAILED
        assert list(chdir_tmp.iterdir()) == []

    def test_filesystem_error_aborts_remaining_files(self, chdir_tmp):
        (chdir_tmp / "blocked").write_text("a file where a directory should be")

        generator = PluginGenerator(render=echo_render)
        with pytest.raises(FilesystemError):
            generator.run(simple_request("ok.capnp", "blocked/x.capnp", "later.capnp"))

        assert (chdir_tmp / "ok.capnp.c++").exists()
        assert not (chdir_tmp / "later.capnp.h").exists()

    def test_output_dir_from_config(self, tmp_path):
        config = PluginConfig(output_dir=str(tmp_path / "gen"))

        PluginGenerator(render=echo_render, config=config).run(simple_request("pkg/a.capnp"))

        assert (tmp_path / "gen" / "pkg" / "a.capnp.h").read_text() == "// header for pkg/a.capnp\n"

    def test_run_bytes_decodes_request(self, chdir_tmp, calculator_request):
        generator = PluginGenerator(config=PluginConfig(input_format="json"))
        written = generator.run_bytes(json.dumps(calculator_request).encode())

        assert written == ["calculator.capnp.h", "calculator.capnp.c++"]
        assert "class CalculatorService" in (chdir_tmp / "calculator.capnp.h").read_text()

    def test_run_bytes_reads_binary_by_default(self, chdir_tmp, request_schema):
        written = PluginGenerator().run_bytes(binary_request(request_schema))

        assert written == ["svc.capnp.h", "svc.capnp.c++"]
        header = (chdir_tmp / "svc.capnp.h").read_text()
        assert "class SvcService : public ::grpc::Service {" in header
        assert "const Svc::CallParams::Reader& request," in header

    def test_unknown_input_format_is_rejected(self, chdir_tmp):
        generator = PluginGenerator(render=echo_render, config=PluginConfig(input_format="xml"))

        with pytest.raises(PluginError, match="Unknown input format 'xml'"):
            generator.run_bytes(EMPTY_MESSAGE)

        assert generator.state == DriverState.FAILED

    def test_malformed_bytes_fail_before_any_output(self, chdir_tmp):
        generator = PluginGenerator(render=echo_render, config=PluginConfig(input_format="json"))

        with pytest.raises(MalformedRequestError):
            generator.run_bytes(b"{not json")

        assert generator.state == DriverState.FAILED
        assert list(chdir_tmp.iterdir()) == []

    def test_generator_runs_only_once(self, chdir_tmp):
        generator = PluginGenerator(render=empty_render)
        generator.run(simple_request("a.capnp"))

        with pytest.raises(PluginError, match="state"):
            generator.run(simple_request("b.capnp"))
