"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Version of the Jupyter messaging protocol implemented here.
PROTOCOL_VERSION = '5.3'

# Separates routing identities from the signed part of an envelope.
DELIMITER = b'<IDS|MSG>'

# Header keys, in the order they appear on the wire.
HEADER_KEYS = ('msg_id', 'session', 'username', 'date', 'msg_type', 'version')

# Execution states published on the broadcast channel.
STARTING = 'starting'
BUSY = 'busy'
IDLE = 'idle'

# Reply status values.
OK = 'ok'
ERROR = 'error'

# Who opened a comm.
FRONTEND = 'frontend'
KERNEL = 'kernel'

# is_complete_reply status values.
COMPLETE = 'complete'
INCOMPLETE = 'incomplete'
INVALID = 'invalid'
UNKNOWN = 'unknown'

# Message type tags.
KERNEL_INFO_REQUEST = 'kernel_info_request'
KERNEL_INFO_REPLY = 'kernel_info_reply'
EXECUTE_REQUEST = 'execute_request'
EXECUTE_REPLY = 'execute_reply'
EXECUTE_INPUT = 'execute_input'
EXECUTE_RESULT = 'execute_result'
EXECUTE_ERROR = 'error'
STREAM = 'stream'
COMPLETE_REQUEST = 'complete_request'
COMPLETE_REPLY = 'complete_reply'
IS_COMPLETE_REQUEST = 'is_complete_request'
IS_COMPLETE_REPLY = 'is_complete_reply'
INSPECT_REQUEST = 'inspect_request'
INSPECT_REPLY = 'inspect_reply'
COMM_INFO_REQUEST = 'comm_info_request'
COMM_INFO_REPLY = 'comm_info_reply'
COMM_OPEN = 'comm_open'
COMM_MSG = 'comm_msg'
COMM_CLOSE = 'comm_close'
SHUTDOWN_REQUEST = 'shutdown_request'
SHUTDOWN_REPLY = 'shutdown_reply'
INTERRUPT_REQUEST = 'interrupt_request'
INTERRUPT_REPLY = 'interrupt_reply'
STATUS = 'status'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
