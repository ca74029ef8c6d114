from __future__ import annotations

import re
from typing import Iterable, List, Optional, Set

from .models import ClassDescriptor, GeneratedArtifact, GenerationContext


# ---------------- layout ----------------

REPOSITORY_SUB = "data.access"
DTO_SUB = "service.model"
REQUEST_SUB = "web.model"
MAPPER_SUB = "mapper"
SERVICE_SUB = "service"
CONTROLLER_SUB = "web"

ID_TYPE = "Long"

# ---------------- shared templating helpers ----------------

def lower_first(s: str) -> str:
    return s[:1].lower() + s[1:] if s else s

def join_package(base: str, sub: str) -> str:
    return f"{base}.{sub}" if base else sub

def package_dir(sub: str) -> str:
    return sub.replace(".", "/")

def render_import_block(items: Iterable[str], extra: Optional[List[str]] = None) -> str:
    """Render Java import lines, sorted and de-duplicated.

    Items may be bare fully qualified names or full ``import ...;`` lines.
    """
    out: Set[str] = set()

    def add_one(raw: str) -> None:
        s = re.sub(r"^\s*import\s+", "", str(raw or "")).rstrip(";").strip()
        if s:
            out.add(f"import {s};")

    for x in items:
        add_one(x)
    for e in extra or []:
        add_one(e)

    return ("\n".join(sorted(out)) + "\n") if out else ""

def entity_imports(desc: ClassDescriptor) -> Set[str]:
    # classes in the default package cannot be imported
    return {desc.qualified_name} if "." in desc.qualified_name else set()

def field_lines(desc: ClassDescriptor, annotations: Iterable[str] = ()) -> List[str]:
    anns = list(annotations)
    lines: List[str] = []
    for f in desc.fields:
        lines.extend(f"    {a}" for a in anns)
        lines.append(f"    private {f.type_text} {f.name};")
    return lines

def class_body(lines: List[str]) -> str:
    return ("\n".join(lines) + "\n") if lines else ""

def _artifact(sub: str, name: str, pkg: str, code: str) -> GeneratedArtifact:
    return GeneratedArtifact(
        relative_path=package_dir(sub),
        file_name=f"{name}.java",
        package=pkg,
        content=code.rstrip() + "\n",
    )

# ---------------- repository ----------------

def gen_repository(desc: ClassDescriptor, ctx: GenerationContext) -> GeneratedArtifact:
    pkg = join_package(ctx.base_package, REPOSITORY_SUB)
    name = f"{desc.name}Repository"
    imports = entity_imports(desc) | {
        "org.springframework.data.jpa.repository.JpaRepository",
        "org.springframework.data.jpa.repository.JpaSpecificationExecutor",
        "org.springframework.stereotype.Repository",
    }
    code = f"""package {pkg};

{render_import_block(imports)}
@Repository
public interface {name} extends JpaRepository<{desc.name}, {ID_TYPE}>, JpaSpecificationExecutor<{desc.name}> {{
}}
"""
    return _artifact(REPOSITORY_SUB, name, pkg, code)

# ---------------- dto ----------------

def gen_dto(desc: ClassDescriptor, ctx: GenerationContext) -> GeneratedArtifact:
    pkg = join_package(ctx.base_package, DTO_SUB)
    name = f"{desc.name}Dto"
    code = f"""package {pkg};

import lombok.Data;

@Data
public class {name} {{
{class_body(field_lines(desc))}}}
"""
    return _artifact(DTO_SUB, name, pkg, code)

# ---------------- request models ----------------

def gen_request_models(desc: ClassDescriptor, ctx: GenerationContext) -> List[GeneratedArtifact]:
    pkg = join_package(ctx.base_package, REQUEST_SUB)
    request_name = f"{desc.name}Request"
    search_name = f"{desc.name}SearchRequest"

    request = f"""package {pkg};

{render_import_block(["jakarta.validation.constraints.NotNull", "lombok.Data"])}
@Data
public class {request_name} {{
{class_body(field_lines(desc, annotations=["@NotNull"]))}}}
"""

    search = f"""package {pkg};

import lombok.Data;

@Data
public class {search_name} {{
{class_body(field_lines(desc))}}}
"""
    return [
        _artifact(REQUEST_SUB, request_name, pkg, request),
        _artifact(REQUEST_SUB, search_name, pkg, search),
    ]

# ---------------- mapper ----------------

def gen_mapper(desc: ClassDescriptor, ctx: GenerationContext) -> GeneratedArtifact:
    base = ctx.base_package
    pkg = join_package(base, MAPPER_SUB)
    name = f"{desc.name}Mapper"
    request_name = f"{desc.name}Request"
    dto_name = f"{desc.name}Dto"

    imports = entity_imports(desc) | {
        f"{join_package(base, REQUEST_SUB)}.{request_name}",
        f"{join_package(base, DTO_SUB)}.{dto_name}",
        "org.mapstruct.Mapper",
        "org.mapstruct.MappingTarget",
        "org.mapstruct.factory.Mappers",
    }

    code = f"""package {pkg};

{render_import_block(imports)}
@Mapper(componentModel = "spring")
public interface {name} {{

    {name} INSTANCE = Mappers.getMapper({name}.class);

    {desc.name} toEntity({request_name} request);

    void updateEntity({request_name} request, @MappingTarget {desc.name} entity);

    {dto_name} toDto({desc.name} entity);
}}
"""
    return _artifact(MAPPER_SUB, name, pkg, code)

# ---------------- service ----------------

def gen_service(desc: ClassDescriptor, ctx: GenerationContext) -> GeneratedArtifact:
    base = ctx.base_package
    pkg = join_package(base, SERVICE_SUB)
    cls = desc.name
    name = f"{cls}Service"
    repo_name = f"{cls}Repository"
    mapper_name = f"{cls}Mapper"
    repo = lower_first(repo_name)
    mapper = lower_first(mapper_name)
    request_name = f"{cls}Request"
    search_name = f"{cls}SearchRequest"
    dto_name = f"{cls}Dto"

    imports = entity_imports(desc) | {
        f"{join_package(base, REPOSITORY_SUB)}.{repo_name}",
        f"{join_package(base, MAPPER_SUB)}.{mapper_name}",
        f"{join_package(base, REQUEST_SUB)}.{request_name}",
        f"{join_package(base, REQUEST_SUB)}.{search_name}",
        f"{join_package(base, DTO_SUB)}.{dto_name}",
        "jakarta.persistence.EntityNotFoundException",
        "lombok.RequiredArgsConstructor",
        "org.springframework.data.domain.Page",
        "org.springframework.stereotype.Service",
    }

    code = f"""package {pkg};

{render_import_block(imports)}
@Service
@RequiredArgsConstructor
public class {name} {{

    private final {repo_name} {repo};
    private final {mapper_name} {mapper};

    public {dto_name} create({request_name} request) {{
        {cls} entity = {mapper}.toEntity(request);
        {cls} savedEntity = {repo}.save(entity);
        return {mapper}.toDto(savedEntity);
    }}

    public {dto_name} update({ID_TYPE} id, {request_name} request) {{
        {cls} entity = {repo}.findById(id)
                .orElseThrow(() -> new EntityNotFoundException("{cls} not found with id: " + id));
        {mapper}.updateEntity(request, entity);
        {cls} updatedEntity = {repo}.save(entity);
        return {mapper}.toDto(updatedEntity);
    }}

    public void delete({ID_TYPE} id) {{
        {repo}.deleteById(id);
    }}

    public {dto_name} get({ID_TYPE} id) {{
        return {repo}.findById(id)
                .map({mapper}::toDto)
                .orElseThrow(() -> new EntityNotFoundException("{cls} not found with id: " + id));
    }}

    public Page<{dto_name}> search({search_name} searchRequest) {{
        // TODO: specification-based search, e.g. {repo}.findAll(spec, pageable).map({mapper}::toDto)
        throw new UnsupportedOperationException("Search not implemented yet");
    }}
}}
"""
    return _artifact(SERVICE_SUB, name, pkg, code)

# ---------------- controller ----------------

def route_path(desc: ClassDescriptor, ctx: GenerationContext) -> str:
    prefix = "/" + ctx.api_prefix.strip("/") if ctx.api_prefix.strip("/") else ""
    return f"{prefix}/{lower_first(desc.name)}"

def gen_controller(desc: ClassDescriptor, ctx: GenerationContext) -> GeneratedArtifact:
    base = ctx.base_package
    pkg = join_package(base, CONTROLLER_SUB)
    cls = desc.name
    name = f"{cls}Controller"
    service_name = f"{cls}Service"
    service = lower_first(service_name)
    request_name = f"{cls}Request"
    search_name = f"{cls}SearchRequest"
    dto_name = f"{cls}Dto"

    imports = {
        f"{join_package(base, SERVICE_SUB)}.{service_name}",
        f"{join_package(base, REQUEST_SUB)}.{request_name}",
        f"{join_package(base, REQUEST_SUB)}.{search_name}",
        f"{join_package(base, DTO_SUB)}.{dto_name}",
        "jakarta.validation.Valid",
        "lombok.RequiredArgsConstructor",
        "org.springframework.data.domain.Page",
        "org.springframework.http.ResponseEntity",
        "org.springframework.web.bind.annotation.*",
    }

    code = f"""package {pkg};

{render_import_block(imports)}
@RestController
@RequestMapping("{route_path(desc, ctx)}")
@RequiredArgsConstructor
public class {name} {{

    private final {service_name} {service};

    @PostMapping
    public ResponseEntity<{dto_name}> create(@Valid @RequestBody {request_name} request) {{
        return ResponseEntity.ok(this.{service}.create(request));
    }}

    @PutMapping("/{{id}}")
    public ResponseEntity<{dto_name}> update(@PathVariable {ID_TYPE} id, @Valid @RequestBody {request_name} request) {{
        return ResponseEntity.ok(this.{service}.update(id, request));
    }}

    @DeleteMapping("/{{id}}")
    public ResponseEntity<Void> delete(@PathVariable {ID_TYPE} id) {{
        this.{service}.delete(id);
        return ResponseEntity.ok().build();
    }}

    @GetMapping("/{{id}}")
    public ResponseEntity<{dto_name}> get(@PathVariable {ID_TYPE} id) {{
        return ResponseEntity.ok(this.{service}.get(id));
    }}

    @PostMapping("/search")
    public ResponseEntity<Page<{dto_name}>> search(@RequestBody {search_name} searchRequest) {{
        return ResponseEntity.ok(this.{service}.search(searchRequest));
    }}
}}
"""
    return _artifact(CONTROLLER_SUB, name, pkg, code)

# ---------------- all ----------------

def generate_all(desc: ClassDescriptor, ctx: GenerationContext) -> List[GeneratedArtifact]:
    files: List[GeneratedArtifact] = []
    files.append(gen_repository(desc, ctx))
    files.append(gen_dto(desc, ctx))
    files.extend(gen_request_models(desc, ctx))
    files.append(gen_mapper(desc, ctx))
    files.append(gen_service(desc, ctx))
    files.append(gen_controller(desc, ctx))
    return files
