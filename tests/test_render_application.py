"""Tests for application layer renderers: commands, handlers, queries, validators."""
import re

from archgen.generators.cqrs_gen import render_application as app
from archgen.generators.cqrs_gen.render_api import render_controller
from archgen.schemas.entities import EntityModel

from conftest import make_product

PREDICATE = ".Where(x => x.IsDeleted == false)"


def test_create_command_excludes_key(product, config):
    text = app.render_create_command(product, config)
    assert "public record CreateProductCommand : IRequest<int>" in text
    assert "public string Name { get; init; } = string.Empty;" in text
    assert "Id { get; init; }" not in text


def test_update_command_includes_key(product, config):
    text = app.render_update_command(product, config)
    assert "public record UpdateProductCommand : IRequest<bool>" in text
    assert "public int Id { get; init; }" in text


def test_delete_command_is_positional(product, config):
    text = app.render_delete_command(product, config)
    assert "public record DeleteProductCommand(int Id) : IRequest<bool>;" in text


def test_without_mediator(product, config):
    config = config.model_copy(update={"use_mediator": False})
    command = app.render_create_command(product, config)
    handler = app.render_create_handler(product, config)
    assert "MediatR" not in command and "IRequest" not in command
    assert "public class CreateProductCommandHandler\n" in handler


def test_soft_delete_handler_flags_instead_of_removing(product, config):
    """Soft-delete entities are never removed, and reads filter deleted rows."""
    delete = app.render_delete_handler(product, config)
    assert "entity.IsDeleted = true;" in delete
    assert "entity.DeletedAt = DateTime.UtcNow;" in delete
    assert ".Remove(" not in delete
    assert PREDICATE in app.render_get_all_handler(product, config)
    assert PREDICATE in app.render_get_by_id_handler(product, config)


def test_hard_delete_handler_removes(config):
    product = make_product(hasSoftDelete=False)
    delete = app.render_delete_handler(product, config)
    assert "_context.Products.Remove(entity);" in delete
    assert "IsDeleted" not in delete
    assert PREDICATE not in app.render_get_all_handler(product, config)
    assert PREDICATE not in app.render_get_by_id_handler(product, config)


def test_create_handler_stamps_created_at(product, config):
    text = app.render_create_handler(product, config)
    assert "CreatedAt = DateTime.UtcNow" in text
    assert "return entity.Id;" in text


def test_update_handler_returns_false_when_missing(product, config):
    text = app.render_update_handler(product, config)
    assert "FirstOrDefaultAsync(x => x.Id == request.Id, cancellationToken)" in text
    assert "return false;" in text
    assert "entity.UpdatedAt = DateTime.UtcNow;" in text


def test_projection_follows_dto_order(product, config):
    dto = app.render_dto(product, config)
    handler = app.render_get_all_handler(product, config)
    dto_names = re.findall(r"public [\w<>?]+ (\w+) \{ get; set; \}", dto)
    projected = re.findall(r"(\w+) = x\.\1", handler)
    assert projected == dto_names
    assert dto_names == ["Id", "Name", "Price", "CreatedAt", "CreatedBy", "UpdatedAt", "UpdatedBy"]


def test_implicit_key_is_consistent(config):
    """No marked key: every renderer uses Id of type int."""
    entity = EntityModel.model_validate({"name": "Tag", "properties": [{"name": "Label", "type": "string"}]})
    assert "public record CreateTagCommand : IRequest<int>" in app.render_create_command(entity, config)
    assert "public int Id { get; init; }" in app.render_update_command(entity, config)
    assert "DeleteTagCommand(int Id)" in app.render_delete_command(entity, config)
    assert "GetTagByIdQuery(int Id)" in app.render_get_by_id_query(entity, config)
    assert "x.Id == request.Id" in app.render_update_handler(entity, config)
    controller = render_controller(entity, config)
    assert "GetById(int id," in controller
    assert "if (id != command.Id)" in controller


def test_unmarked_id_stays_out_of_create(config):
    entity = EntityModel.model_validate({
        "name": "Tag",
        "properties": [{"name": "Id", "type": "int"}, {"name": "Label", "type": "string"}],
    })
    create = app.render_create_command(entity, config)
    assert "Id { get; init; }" not in create
    assert app.render_update_command(entity, config).count("public int Id { get; init; }") == 1
    dto = app.render_dto(entity, config)
    assert dto.count(" Id { get; set; }") == 1


def test_second_marked_key_is_carried_by_commands(config):
    entity = EntityModel.model_validate({
        "name": "Line",
        "properties": [
            {"name": "OrderId", "type": "int", "isKey": True},
            {"name": "LineNo", "type": "int", "isKey": True},
        ],
    })
    assert "public int LineNo { get; init; }" in app.render_create_command(entity, config)
    assert "entity.LineNo = request.LineNo;" in app.render_update_handler(entity, config)


def test_validator_has_one_required_rule_per_required_property(product, config):
    text = app.render_create_validator(product, config)
    assert text.count('.NotEmpty().WithMessage("Name is required.")') == 1
    assert text.count('.NotEmpty().WithMessage("Price is required.")') == 1
    assert '.MaximumLength(200).WithMessage("Name must not exceed 200 characters.")' in text
    assert "RuleFor(x => x.Id)" not in text


def test_validator_skips_unconstrained_properties(config):
    entity = EntityModel.model_validate({
        "name": "Note",
        "properties": [
            {"name": "Title", "type": "string", "isRequired": True},
            {"name": "Body", "type": "string"},
        ],
    })
    text = app.render_create_validator(entity, config)
    assert "RuleFor(x => x.Title)" in text
    assert "RuleFor(x => x.Body)" not in text


def test_update_validator_checks_key(product, config):
    text = app.render_update_validator(product, config)
    assert "RuleFor(x => x.Id).NotEmpty();" in text


def test_constraint_rules(config):
    entity = EntityModel.model_validate({
        "name": "Item",
        "properties": [
            {"name": "Code", "type": "string", "constraints": {"minLength": 3, "regexPattern": "^[A-Z]+$"}},
            {"name": "Qty", "type": "int", "constraints": {"minValue": 1, "maxValue": 99}},
            {"name": "Price", "type": "decimal", "constraints": {"precision": 18, "scale": 2}},
            {"name": "Memo", "type": "string", "isNullable": True, "maxLength": 50},
        ],
    })
    text = app.render_create_validator(entity, config)
    assert ".MinimumLength(3)" in text
    assert '.Matches(@"^[A-Z]+$")' in text
    assert ".GreaterThanOrEqualTo(1)" in text
    assert ".LessThanOrEqualTo(99)" in text
    assert ".PrecisionScale(18, 2, true)" in text
    assert ".When(x => x.Memo != null);" in text


def test_bool_required_uses_not_null(config):
    entity = EntityModel.model_validate({
        "name": "Toggle",
        "properties": [{"name": "Active", "type": "bool", "isRequired": True}],
    })
    assert '.NotNull().WithMessage("Active is required.");' in app.render_create_validator(entity, config)


def test_mapping_profiles(product, customer, config):
    profile = app.render_mapping_profile(product, config)
    assert "CreateMap<Product, ProductDto>();" in profile
    registry = app.render_master_mapping([product, customer], config)
    assert "typeof(ProductMappingProfile)," in registry
    assert "typeof(CustomerMappingProfile)" in registry


def test_paged_query_extends_shared_model(product, config):
    text = app.render_get_paged_query(product, config)
    assert "namespace Shop.Application.Products.Queries.GetPagedProducts;" in text
    assert "public record GetPagedProductsQuery : PagedQuery, IRequest<PagedResult<ProductDto>>;" in text
    assert "using Shop.Application.Common.Models;" in text


def test_paged_handler_filters_sorts_and_pages(config):
    entity = make_product(properties=[
        {"name": "Id", "type": "int", "isKey": True},
        {"name": "Name", "type": "string", "isRequired": True},
        {"name": "Notes", "type": "string", "isNullable": True},
        {"name": "Price", "type": "decimal"},
        {"name": "Stock", "type": "int"},
        {"name": "Sku", "type": "string"},
        {"name": "Weight", "type": "double"},
    ])
    text = app.render_get_paged_handler(entity, config)
    assert "IQueryable<Product> query = _context.Products.AsNoTracking();" in text
    assert f"query = query{PREDICATE};" in text
    assert "x.Name.ToLower().Contains(term)" in text
    assert "|| (x.Notes != null && x.Notes.ToLower().Contains(term))" in text
    assert "|| x.Sku.ToLower().Contains(term));" in text
    sortable = re.findall(r'"(\w+)" => request.SortDescending', text)
    assert sortable == ["id", "name", "notes", "price", "stock"]
    assert text.index("CountAsync") < text.index(".Skip((request.PageNumber - 1) * request.PageSize)")
    assert "return new PagedResult<ProductDto>(items, totalCount, request.PageNumber, request.PageSize);" in text


def test_paged_handler_without_string_properties(config):
    entity = EntityModel.model_validate({"name": "Reading", "properties": [{"name": "Value", "type": "double"}]})
    text = app.render_get_paged_handler(entity, config)
    assert "SearchTerm" not in text
    assert '"value" => request.SortDescending' in text
