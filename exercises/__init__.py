"""Record data-manipulation exercises over the CRM object model.

Each function takes a RecordStore first and demonstrates one pattern:
- accounts: create_basic_account, create_named_account,
            update_account_fields, upsert_account_by_name
- contacts: create_linked_contact, rename_contact, link_contacts_to_accounts
- opportunities: restage_opportunity, normalize_opportunities,
                 create_opportunities_for_account
- leads: create_and_delete_leads
- cases: create_and_delete_cases
"""
