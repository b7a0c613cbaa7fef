from dataclasses import dataclass
from typing import List

from collectors.common import csv_field, decode_csv, map_rows, record_hash, split_header
from core.cleaner import RowCleaner
from core.report import AZURE

AZURE_ROW_LENGTH = 31


@dataclass
class AzureUsage:
    account_owner_id: str = csv_field("AccountOwnerId")
    account_name: str = csv_field("Account Name")
    service_administrator_id: str = csv_field("ServiceAdministratorId")
    subscription_id: str = csv_field("SubscriptionId")
    subscription_guid: str = csv_field("SubscriptionGuid")
    subscription_name: str = csv_field("Subscription Name")
    date: str = csv_field("Date")
    month: str = csv_field("Month")
    day: str = csv_field("Day")
    year: str = csv_field("Year")
    product: str = csv_field("Product")
    meter_id: str = csv_field("Meter ID")
    meter_category: str = csv_field("Meter Category")
    meter_sub_category: str = csv_field("Meter Sub-Category")
    meter_region: str = csv_field("Meter Region")
    meter_name: str = csv_field("Meter Name")
    consumed_quantity: str = csv_field("Consumed Quantity")
    resource_rate: str = csv_field("ResourceRate")
    extended_cost: str = csv_field("ExtendedCost")
    resource_location: str = csv_field("Resource Location")
    consumed_service: str = csv_field("Consumed Service")
    instance_id: str = csv_field("Instance ID")
    service_info1: str = csv_field("ServiceInfo1")
    service_info2: str = csv_field("ServiceInfo2")
    additional_info: str = csv_field("AdditionalInfo")
    tags: str = csv_field("Tags")
    store_service_identifier: str = csv_field("Store Service Identifier")
    department_name: str = csv_field("Department Name")
    cost_center: str = csv_field("Cost Center")
    unit_of_measure: str = csv_field("Unit Of Measure")
    resource_group: str = csv_field("Resource Group")

    def hash(self, region: str) -> str:
        return record_hash(self, region)


def read_usage(data: bytes) -> List[AzureUsage]:
    """
    Decode an Azure enrollment detail report.

    The report opens with a short free-text preamble; rows of any width other
    than the detail table's are dropped before the header is located.
    """
    rows = decode_csv(data, AZURE)
    if not rows:
        return []
    cleaner = RowCleaner(AZURE_ROW_LENGTH)
    rows = cleaner.remove_irregular_length_rows(cleaner.remove_empty_rows(rows))
    header, body = split_header(rows, "AccountOwnerId", AZURE)
    return [AzureUsage(**values) for values in map_rows(header, body, AzureUsage, AZURE)]
