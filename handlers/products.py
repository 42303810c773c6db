"""
Product handlers for the product service API.

- POST /products
- GET /products/{id}
- PUT /products/{id}
- DELETE /products/{id}
- GET /products
"""

from models.product import (CreateProductRequest, GetProductsRequest,
                            UpdateProductRequest)
from services import products
from services.product_table import ProductTable
from utils.decorators import (extract_path_params, lambda_handler,
                              require_auth, validate_json_body)
from utils.responses import HTTPStatus, no_content_response, success_response
from utils.validation import parse_model

product_table = ProductTable()


@lambda_handler()
@require_auth
@validate_json_body()
def create_product(event, context):
    """
    Create a product.

    POST /products

    Returns:
        201 with the created product
    """
    request = parse_model(CreateProductRequest, event["json_body"], "Invalid product")
    product = products.create_product(product_table, request)
    return success_response(product, HTTPStatus.CREATED)


@lambda_handler()
@require_auth
@extract_path_params("id")
def get_product(event, context):
    """GET /products/{id}"""
    product = products.get_product(product_table, event["path_params"]["id"])
    return success_response(product)


@lambda_handler()
@require_auth
@extract_path_params("id")
@validate_json_body()
def update_product(event, context):
    """
    Partially update a product.

    PUT /products/{id}
    """
    request = parse_model(UpdateProductRequest, event["json_body"], "Invalid product")
    product = products.update_product(product_table, event["path_params"]["id"], request)
    return success_response(product)


@lambda_handler()
@require_auth
@extract_path_params("id")
def delete_product(event, context):
    """
    Delete a product.

    DELETE /products/{id}

    Returns:
        204 with an empty body
    """
    products.delete_product(product_table, event["path_params"]["id"])
    return no_content_response()


@lambda_handler()
@require_auth
def list_products(event, context):
    """
    List products one page at a time.

    GET /products?limit=&nextToken=&productType=&productCategory=&status=&brand=&manufacturer=&minPrice=&maxPrice=

    Returns:
        200 with ``{"products": [...], "nextToken": "..."}``
    """
    request = GetProductsRequest.from_query_parameters(
        event.get("queryStringParameters")
    )
    return success_response(products.get_products(product_table, request))
