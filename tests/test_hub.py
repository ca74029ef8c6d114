"""End-to-end runs of the generation action."""

import json
from pathlib import Path

import pytest

from conftest import list_files, write

from restgen import RestGenConfig, RestGenError, RestGenHub
from restgen.hub import MSG_NO_CLASS, MSG_NO_FILE, PROJECT_DEFAULT, form_config


GENERATED = {
    "src/main/java/com/app/data/access/OrderRepository.java",
    "src/main/java/com/app/service/model/OrderDto.java",
    "src/main/java/com/app/web/model/OrderRequest.java",
    "src/main/java/com/app/web/model/OrderSearchRequest.java",
    "src/main/java/com/app/mapper/OrderMapper.java",
    "src/main/java/com/app/service/OrderService.java",
    "src/main/java/com/app/web/OrderController.java",
}


@pytest.fixture
def hub() -> RestGenHub:
    return RestGenHub()


class TestInputErrors:
    def test_no_file(self, hub) -> None:
        lines = []
        result = hub.run(RestGenConfig(source_file=None), on_line=lines.append)

        assert result.return_code == 2
        assert result.message.level == "error"
        assert result.message.text == "No file selected"
        assert result.artifacts == []
        assert lines == ["[ERROR] No file selected"]

    def test_missing_file(self, hub, tmp_path: Path) -> None:
        result = hub.run(RestGenConfig(source_file=tmp_path / "Gone.java"))

        assert result.message.text == MSG_NO_FILE

    def test_no_class(self, hub, java_project: Path) -> None:
        src = write(java_project / "src/main/java/com/app/domain/package-info.java", "package com.app.domain;\n")
        before = list_files(java_project)

        result = hub.run(RestGenConfig(source_file=src))

        assert result.return_code == 2
        assert result.message.level == "error"
        assert result.message.text == "No class found in the selected file."
        assert result.message.text == MSG_NO_CLASS
        assert result.artifacts == []
        assert list_files(java_project) == before


class TestJavaGeneration:
    def test_writes_seven_files(self, hub, java_project: Path, order_file: Path) -> None:
        result = hub.run(RestGenConfig(source_file=order_file))

        assert result.return_code == 0
        assert GENERATED <= list_files(java_project)
        assert len(result.artifacts) == 7
        assert len(result.written) == 7

    def test_completion_message(self, hub, order_file: Path) -> None:
        lines = []
        result = hub.run(RestGenConfig(source_file=order_file), on_line=lines.append)

        assert result.message.level == "info"
        assert result.message.text == "Generating REST components for Order"
        assert lines[-1] == "[DONE] Generating REST components for Order"

    def test_example_dto_and_route(self, hub, java_project: Path, order_file: Path) -> None:
        hub.run(RestGenConfig(source_file=order_file))
        base = java_project / "src/main/java/com/app"

        dto = (base / "service/model/OrderDto.java").read_text(encoding="utf-8")
        assert dto.startswith("package com.app.service.model;\n")
        assert "    private Long id;\n    private Double total;\n" in dto

        controller = (base / "web/OrderController.java").read_text(encoding="utf-8")
        assert '@RequestMapping("/api/order")' in controller

    def test_descriptor_returned(self, hub, order_file: Path) -> None:
        result = hub.run(RestGenConfig(source_file=order_file))

        assert result.descriptor.qualified_name == "com.app.domain.Order"
        assert result.descriptor.fields[0].name == "id"

    def test_second_run_refuses_by_default(self, hub, java_project: Path, order_file: Path) -> None:
        hub.run(RestGenConfig(source_file=order_file))
        service = java_project / "src/main/java/com/app/service/OrderService.java"
        service.write_text("// edited\n", encoding="utf-8")

        with pytest.raises(RestGenError, match="Refusing to overwrite"):
            hub.run(RestGenConfig(source_file=order_file))
        assert service.read_text(encoding="utf-8") == "// edited\n"

    def test_second_run_skip(self, hub, order_file: Path) -> None:
        hub.run(RestGenConfig(source_file=order_file))
        result = hub.run(RestGenConfig(source_file=order_file, overwrite_policy="skip"))

        assert result.return_code == 0
        assert len(result.skipped) == 7
        assert result.written == []

    def test_second_run_overwrite(self, hub, java_project: Path, order_file: Path) -> None:
        hub.run(RestGenConfig(source_file=order_file))
        service = java_project / "src/main/java/com/app/service/OrderService.java"
        service.write_text("// edited\n", encoding="utf-8")

        hub.run(RestGenConfig(source_file=order_file, overwrite_policy="overwrite"))

        assert "public class OrderService" in service.read_text(encoding="utf-8")

    def test_dry_run(self, hub, java_project: Path, order_file: Path) -> None:
        before = list_files(java_project)
        lines = []

        result = hub.run(RestGenConfig(source_file=order_file, dry_run=True), on_line=lines.append)

        assert result.return_code == 0
        assert len(result.artifacts) == 7
        assert result.written == []
        assert list_files(java_project) == before
        assert sum(1 for line in lines if line.startswith("[DRY]")) == 7

    def test_api_prefix_override(self, hub, java_project: Path, order_file: Path) -> None:
        hub.run(RestGenConfig(source_file=order_file, api_prefix="/api/v1"))
        controller = java_project / "src/main/java/com/app/web/OrderController.java"

        assert '@RequestMapping("/api/v1/order")' in controller.read_text(encoding="utf-8")

    def test_config_file(self, hub, java_project: Path, order_file: Path) -> None:
        write(java_project / ".restgen/config.json", json.dumps({"api_prefix": "/v2"}))

        result = hub.run(RestGenConfig(source_file=order_file))

        controller = next(a for a in result.artifacts if a.file_name == "OrderController.java")
        assert '@RequestMapping("/v2/order")' in controller.content

    def test_explicit_source_roots(self, hub, tmp_path: Path) -> None:
        root = tmp_path / "custom"
        src = write(root / "sources/org/acme/model/Item.java", "package org.acme.model;\nclass Item { String sku; }\n")

        result = hub.run(RestGenConfig(source_file=src, project_root=root, source_roots=["sources"]))

        assert result.artifacts[0].package == "org.acme.data.access"
        assert (root / "sources/org/acme/data/access/ItemRepository.java").exists()

    def test_outside_source_roots(self, hub, tmp_path: Path) -> None:
        src = write(tmp_path / "loose/domain/Item.java", "class Item { String sku; }\n")

        result = hub.run(RestGenConfig(source_file=src))

        assert result.artifacts[0].package == "data.access"
        assert (tmp_path / "loose/data/access/ItemRepository.java").exists()


class TestKotlinGeneration:
    def test_kotlin_class(self, hub, kotlin_project: Path, customer_file: Path) -> None:
        result = hub.run(RestGenConfig(source_file=customer_file))
        base = kotlin_project / "src/main/kotlin/com/app"

        assert result.return_code == 0
        dto = (base / "service/model/CustomerDto.java").read_text(encoding="utf-8")
        assert dto.startswith("package com.app.service.model;\n")
        assert "    private Long id;\n    private String? name;\n" in dto
        assert "    private null score;" in dto

    def test_strict_types_fails_before_writing(self, hub, kotlin_project: Path, customer_file: Path) -> None:
        before = list_files(kotlin_project)

        with pytest.raises(RestGenError, match="score"):
            hub.run(RestGenConfig(source_file=customer_file, strict_types=True))
        assert list_files(kotlin_project) == before


class TestFormConfig:
    def test_untouched_form_leaves_options_unset(self) -> None:
        config = form_config("Order.java")

        assert config.source_file == Path("Order.java")
        assert config.project_root is None
        assert config.api_prefix is None
        assert config.overwrite_policy is None
        assert config.strict_types is None

    def test_untouched_form_keeps_project_config(self, hub, java_project: Path, order_file: Path) -> None:
        write(java_project / ".restgen/config.json", json.dumps({
            "api_prefix": "/api/v1",
            "overwrite_policy": "skip",
            "strict_types": True,
        }))
        config = form_config(str(order_file), api_prefix="  ", overwrite_policy=PROJECT_DEFAULT,
                             type_check=PROJECT_DEFAULT)

        settings = hub.settings(config, java_project)

        assert settings["api_prefix"] == "/api/v1"
        assert settings["overwrite_policy"] == "skip"
        assert settings["strict_types"] is True

    def test_chosen_values_win(self, hub, java_project: Path, order_file: Path) -> None:
        write(java_project / ".restgen/config.json", json.dumps({"strict_types": True}))
        config = form_config(str(order_file), api_prefix="/v3", overwrite_policy="overwrite", type_check="warn")

        settings = hub.settings(config, java_project)

        assert settings["api_prefix"] == "/v3"
        assert settings["overwrite_policy"] == "overwrite"
        assert settings["strict_types"] is False

    def test_blank_source_file(self) -> None:
        assert form_config("").source_file is None
