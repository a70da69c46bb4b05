#!/usr/bin/env python3
"""
Script to set up and validate the MongoDB Atlas Search index used by the
product search endpoints.
"""

import os
import json
import argparse
import sys
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from pymongo.operations import SearchIndexModel
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/productdb")
DEFAULT_DATABASE_NAME = "productdb"
DEFAULT_COLLECTION_NAME = os.getenv("PRODUCT_COLLECTION", "products")
DEFAULT_INDEX_NAME = os.getenv("SEARCH_INDEX_NAME", "product_search")


def text_field_mapping():
    """Analyzed text, an untokenized form for exact match/sort, and autocomplete for suggestions"""
    return [
        {"type": "string", "analyzer": "lucene.standard"},
        {"type": "token", "normalizer": "none"},
        {"type": "autocomplete", "tokenization": "edgeGram", "minGrams": 2, "maxGrams": 15},
    ]


def get_index_definition():
    """Return the Atlas Search index definition for the products collection"""
    return {
        "mappings": {
            "dynamic": False,
            "fields": {
                "name": text_field_mapping(),
                "description": text_field_mapping(),
                "category": text_field_mapping(),
                "brand": text_field_mapping(),
                "tags": {"type": "token", "normalizer": "none"},
                "price": {"type": "number"},
                "rating": {"type": "number"},
                "stockQuantity": {"type": "number"},
                "reviewCount": {"type": "number"},
                "createdAt": {"type": "number"},
                "updatedAt": {"type": "number"},
                "active": {"type": "boolean"},
                "featured": {"type": "boolean"}
            }
        }
    }


def check_atlas_connection(mongodb_uri):
    """Check connection to MongoDB Atlas"""
    try:
        client = MongoClient(mongodb_uri)
        client.admin.command('ping')
        print("✅ Successfully connected to MongoDB")
        return client
    except PyMongoError as e:
        print(f"❌ Error connecting to MongoDB: {str(e)}")
        return None


def check_index_exists(client, database_name, collection_name, index_name):
    """Check if the Atlas Search index exists"""
    collection = client[database_name][collection_name]

    try:
        for index in collection.list_search_indexes():
            if index.get("name") == index_name:
                print(f"✅ Index '{index_name}' exists on collection '{collection_name}' "
                      f"(status: {index.get('status', 'unknown')})")
                return True

        print(f"❌ Index '{index_name}' does not exist on collection '{collection_name}'")
        return False
    except PyMongoError as e:
        print(f"❌ Error checking indexes: {str(e)}")
        return False


def create_index(client, database_name, collection_name, index_name):
    """Create the search index; Atlas builds it in the background"""
    collection = client[database_name][collection_name]

    try:
        collection.create_search_index(SearchIndexModel(definition=get_index_definition(), name=index_name))
        print(f"✅ Requested creation of index '{index_name}', it will be queryable once Atlas finishes building it")
        return True
    except PyMongoError as e:
        print(f"❌ Error creating index: {str(e)}")
        return False


def check_collection_status(client, database_name, collection_name):
    """Check collection status and count documents"""
    collection = client[database_name][collection_name]

    try:
        doc_count = collection.count_documents({})
        print(f"✅ Collection '{collection_name}' exists with {doc_count} documents")

        active_count = collection.count_documents({"active": True})
        print(f"  - {active_count} documents are active and searchable")
        return True
    except PyMongoError as e:
        print(f"❌ Error checking collection: {str(e)}")
        return False


def display_setup_instructions(database_name, collection_name, index_name):
    """Display instructions for manual setup in Atlas"""
    print("\n==== Atlas Search Setup Instructions ====")
    print("\nTo create the product search index in MongoDB Atlas:")
    print("1. Log in to your MongoDB Atlas account")
    print("2. Navigate to your cluster")
    print("3. Click on 'Search' tab")
    print("4. Click 'Create Index'")
    print("5. Select JSON Editor and enter the following configuration:")
    print("\n```json")
    print(json.dumps(get_index_definition(), indent=2))
    print("```\n")
    print(f"6. Name your index '{index_name}'")
    print(f"7. Select the '{database_name}.{collection_name}' namespace")
    print("8. Click 'Create Search Index'")
    print("\nAlternatively run this script again with --create.")
    print("\nNote: Index creation may take a few minutes to complete.")


def main():
    parser = argparse.ArgumentParser(description="Set up and validate the MongoDB Atlas Search index")
    parser.add_argument("--uri", default=DEFAULT_MONGODB_URI, help="MongoDB URI connection string")
    parser.add_argument("--database", default=DEFAULT_DATABASE_NAME, help="Database name")
    parser.add_argument("--collection", default=DEFAULT_COLLECTION_NAME, help="Collection name")
    parser.add_argument("--index", default=DEFAULT_INDEX_NAME, help="Search index name")
    parser.add_argument("--instructions", action="store_true", help="Display setup instructions only")
    parser.add_argument("--create", action="store_true", help="Create the index if it does not exist")

    args = parser.parse_args()

    if args.instructions:
        display_setup_instructions(args.database, args.collection, args.index)
        return

    client = check_atlas_connection(args.uri)
    if not client:
        print("Failed to connect to MongoDB. Please check your connection string.")
        sys.exit(1)

    check_collection_status(client, args.database, args.collection)

    index_exists = check_index_exists(client, args.database, args.collection, args.index)

    if not index_exists:
        if args.create:
            if not create_index(client, args.database, args.collection, args.index):
                client.close()
                sys.exit(1)
        else:
            print("\n⚠️ The required Atlas Search index was not found.")
            display_setup_instructions(args.database, args.collection, args.index)

    client.close()


if __name__ == "__main__":
    main()
