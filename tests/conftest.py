"""Shared fixtures: throwaway Maven/Gradle project trees."""

from pathlib import Path

import pytest


ORDER_JAVA = """package com.app.domain;

import java.util.List;
import java.util.Map;

public class Order {
    private static final long serialVersionUID = 1L;

    private Long id;
    private Double total;
    private List<String> tags;
    private Map<String, List<Long>> index;
    private int[] codes;
    private int a, b;
    private java.time.Instant createdAt;

    public Long getId() {
        return id;
    }
}
"""

CUSTOMER_KT = """package com.app.domain

data class Customer(
    val id: Long,
    var name: String?,
    val tags: List<String> = emptyList(),
    other: Int
) {
    var nickname: String? = null
    val score = 0

    companion object {
        val DEFAULT: String = "x"
    }
}
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def java_project(tmp_path: Path) -> Path:
    """Maven project with com.app.domain.Order under src/main/java."""
    root = tmp_path / "shop"
    write(root / "pom.xml", "<project/>\n")
    write(root / "src/main/java/com/app/domain/Order.java", ORDER_JAVA)
    return root


@pytest.fixture
def order_file(java_project: Path) -> Path:
    return java_project / "src/main/java/com/app/domain/Order.java"


@pytest.fixture
def kotlin_project(tmp_path: Path) -> Path:
    """Gradle project with com.app.domain.Customer under src/main/kotlin."""
    root = tmp_path / "crm"
    write(root / "build.gradle.kts", "plugins {}\n")
    write(root / "src/main/kotlin/com/app/domain/Customer.kt", CUSTOMER_KT)
    return root


@pytest.fixture
def customer_file(kotlin_project: Path) -> Path:
    return kotlin_project / "src/main/kotlin/com/app/domain/Customer.kt"


def list_files(root: Path) -> set:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}
