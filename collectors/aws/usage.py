from dataclasses import dataclass, field
from typing import List

from collectors.common import csv_field, decode_csv, map_rows, record_hash, split_header
from core.cleaner import RowCleaner
from core.fields import parse_float, warn_invalid
from core.report import AWS

LINKED_LINE_ITEM = "LinkedLineItem"


@dataclass
class AWSUsage:
    invoice_id: str = csv_field("InvoiceID")
    payer_account_id: str = csv_field("PayerAccountId")
    linked_account_id: str = csv_field("LinkedAccountId")
    record_type: str = csv_field("RecordType")
    record_id: str = csv_field("RecordID")
    billing_period_start_date: str = csv_field("BillingPeriodStartDate")
    billing_period_end_date: str = csv_field("BillingPeriodEndDate")
    invoice_date: str = csv_field("InvoiceDate")
    payer_account_name: str = csv_field("PayerAccountName")
    linked_account_name: str = csv_field("LinkedAccountName")
    taxation_address: str = csv_field("TaxationAddress")
    payer_po_number: str = csv_field("PayerPONumber")
    product_code: str = csv_field("ProductCode")
    product_name: str = csv_field("ProductName")
    seller_of_record: str = csv_field("SellerOfRecord")
    usage_type: str = csv_field("UsageType")
    operation: str = csv_field("Operation")
    rate_id: str = csv_field("RateId")
    item_description: str = csv_field("ItemDescription")
    usage_start_date: str = csv_field("UsageStartDate")
    usage_end_date: str = csv_field("UsageEndDate")
    usage_quantity: float = csv_field("UsageQuantity", default=0.0)
    blended_rate: str = csv_field("BlendedRate")
    currency_code: str = csv_field("CurrencyCode")
    cost_before_tax: str = csv_field("CostBeforeTax")
    credits: str = csv_field("Credits")
    tax_amount: str = csv_field("TaxAmount")
    tax_type: str = csv_field("TaxType")
    total_cost: float = csv_field("TotalCost", default=0.0)
    # not part of the export; folded into the identity hash as the region
    availability_zone: str = field(default="", metadata={"identity": False})

    def hash(self, region: str) -> str:
        return record_hash(self, region)


def read_usage(data: bytes, availability_zone: str, log) -> List[AWSUsage]:
    """Decode a monthly AWS billing CSV into typed usage records."""
    rows = decode_csv(data, AWS)
    if not rows:
        return []
    header, body = split_header(rows, "InvoiceID", AWS)
    cleaner = RowCleaner(len(header))
    body = cleaner.remove_short_and_truncate_long_rows(cleaner.remove_empty_rows(body))

    usages: List[AWSUsage] = []
    for values in map_rows(header, body, AWSUsage, AWS):
        quantity = parse_float("usage quantity", values["usage_quantity"])
        cost = parse_float("total cost", values["total_cost"])
        if values["record_type"] == LINKED_LINE_ITEM:
            warn_invalid(log, quantity)
            warn_invalid(log, cost)
        values.update(
            usage_quantity=quantity.value,
            total_cost=cost.value,
            availability_zone=availability_zone,
        )
        usages.append(AWSUsage(**values))
    return usages
