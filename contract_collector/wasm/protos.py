"""
CosmWasm Query Protobuf Messages

Message classes for the raw contract state query, built at import time from
descriptor protos so no generated _pb2 modules are needed.

Mirrors:
- cosmos/base/query/v1beta1/pagination.proto (PageRequest, PageResponse)
- cosmwasm/wasm/v1/query.proto (Model, QueryAllContractState*)

Only the fields the collector touches need to match upstream; field numbers
and wire types are identical, so the messages interoperate with real nodes.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_FDP = descriptor_pb2.FieldDescriptorProto

PAGINATION_PACKAGE = 'cosmos.base.query.v1beta1'
WASM_PACKAGE = 'cosmwasm.wasm.v1'

_pool = descriptor_pool.DescriptorPool()


def _add_message(file_proto, name, fields):
    """Append a message with (name, number, type, label, type_name) fields."""
    message = file_proto.message_type.add()
    message.name = name
    for field_name, number, field_type, label, type_name in fields:
        f = message.field.add()
        f.name = field_name
        f.number = number
        f.type = field_type
        f.label = label
        if type_name:
            f.type_name = type_name
    return message


def _pagination_file():
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = 'cosmos/base/query/v1beta1/pagination.proto'
    file_proto.package = PAGINATION_PACKAGE
    file_proto.syntax = 'proto3'

    _add_message(file_proto, 'PageRequest', [
        ('key', 1, _FDP.TYPE_BYTES, _FDP.LABEL_OPTIONAL, None),
        ('offset', 2, _FDP.TYPE_UINT64, _FDP.LABEL_OPTIONAL, None),
        ('limit', 3, _FDP.TYPE_UINT64, _FDP.LABEL_OPTIONAL, None),
        ('count_total', 4, _FDP.TYPE_BOOL, _FDP.LABEL_OPTIONAL, None),
        ('reverse', 5, _FDP.TYPE_BOOL, _FDP.LABEL_OPTIONAL, None),
    ])
    _add_message(file_proto, 'PageResponse', [
        ('next_key', 1, _FDP.TYPE_BYTES, _FDP.LABEL_OPTIONAL, None),
        ('total', 2, _FDP.TYPE_UINT64, _FDP.LABEL_OPTIONAL, None),
    ])
    return file_proto


def _query_file(dependency):
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = 'cosmwasm/wasm/v1/query.proto'
    file_proto.package = WASM_PACKAGE
    file_proto.syntax = 'proto3'
    file_proto.dependency.append(dependency)

    page_request = f'.{PAGINATION_PACKAGE}.PageRequest'
    page_response = f'.{PAGINATION_PACKAGE}.PageResponse'

    _add_message(file_proto, 'Model', [
        ('key', 1, _FDP.TYPE_BYTES, _FDP.LABEL_OPTIONAL, None),
        ('value', 2, _FDP.TYPE_BYTES, _FDP.LABEL_OPTIONAL, None),
    ])
    _add_message(file_proto, 'QueryAllContractStateRequest', [
        ('address', 1, _FDP.TYPE_STRING, _FDP.LABEL_OPTIONAL, None),
        ('pagination', 2, _FDP.TYPE_MESSAGE, _FDP.LABEL_OPTIONAL, page_request),
    ])
    _add_message(file_proto, 'QueryAllContractStateResponse', [
        ('models', 1, _FDP.TYPE_MESSAGE, _FDP.LABEL_REPEATED, f'.{WASM_PACKAGE}.Model'),
        ('pagination', 2, _FDP.TYPE_MESSAGE, _FDP.LABEL_OPTIONAL, page_response),
    ])
    return file_proto


_pagination = _pagination_file()
_pool.AddSerializedFile(_pagination.SerializeToString())
_pool.AddSerializedFile(_query_file(_pagination.name).SerializeToString())


def _message_class(full_name):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(full_name))


PageRequest = _message_class(f'{PAGINATION_PACKAGE}.PageRequest')
PageResponse = _message_class(f'{PAGINATION_PACKAGE}.PageResponse')
Model = _message_class(f'{WASM_PACKAGE}.Model')
QueryAllContractStateRequest = _message_class(f'{WASM_PACKAGE}.QueryAllContractStateRequest')
QueryAllContractStateResponse = _message_class(f'{WASM_PACKAGE}.QueryAllContractStateResponse')
