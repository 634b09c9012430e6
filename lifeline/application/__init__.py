"""Application layer: repository ports and storage services.

Depends on domain and on the storage protocol; infrastructure supplies the
adapters and the credential encryptor.
"""
