"""XR2280x report ids, virtual register map and bit definitions.

Register addresses are virtual: they are carried inside feature reports
rather than mapped into host memory. The I2C control registers live on the
I2C HID interface, everything else (GPIO, PWM, interrupt) on the EDGE
interface.
"""

# ============================================================================
# USB identity (informational; discovery is left to the caller)
# ============================================================================

EXAR_VID = 0x04E2
XR2280X_I2C_PID = 0x1100
XR2280X_EDGE_PID = 0x1200

# ============================================================================
# Feature reports
# ============================================================================

REPORT_ID_WRITE_HID_REGISTER = 0x3C
"""[0x3C, addrLo, addrHi, valLo, valHi]"""

REPORT_ID_SET_HID_READ_ADDRESS = 0x4B
"""[0x4B, addrLo, addrHi]"""

REPORT_ID_READ_HID_REGISTER = 0x5A
"""Response layout: [0x5A, valLo, valHi]"""

WRITE_REGISTER_REPORT_SIZE = 5
SET_READ_ADDRESS_REPORT_SIZE = 3
READ_REGISTER_REPORT_SIZE = 3

# ============================================================================
# I2C
# ============================================================================

REG_I2C_BASE = 0x0340
REG_SCL_LOW = 0x0341
REG_SCL_HIGH = 0x0342

I2C_REGISTER_RANGE = range(REG_I2C_BASE, REG_SCL_HIGH + 1)
"""Addresses served by the I2C HID interface."""

I2C_REPORT_MAX_DATA_SIZE = 32
I2C_OUT_REPORT_SIZE = 36
"""Flags(1) + WrSize(1) + RdSize(1) + SlaveAddr(1) + Data(32)"""
I2C_IN_REPORT_SIZE = 36
I2C_IN_HEADER_SIZE = 4
I2C_IN_READ_LENGTH_OFFSET = 2
I2C_IN_DATA_OFFSET = 4

# I2C_SLAVE_OUT flags (byte 0 of the OUT report)
I2C_OUT_START_BIT = 1 << 0
I2C_OUT_STOP_BIT = 1 << 1
I2C_OUT_ACK_LAST_READ = 1 << 2

# I2C_SLAVE_IN status flags (byte 0 of the IN report)
I2C_IN_REQUEST_ERROR = 1 << 0
I2C_IN_NAK_RECEIVED = 1 << 1
I2C_IN_ARBITRATION_LOST = 1 << 2
I2C_IN_TIMEOUT = 1 << 3

I2C_10BIT_HEADER = 0xF0
"""11110XX0: high address bits go in XX."""

I2C_MAX_7BIT_ADDRESS = 0x7F
I2C_MAX_10BIT_ADDRESS = 0x3FF

I2C_CLOCK_BUDGET_KHZ = 60_000
"""SCL half-periods are counted in 60 MHz master clock cycles."""
I2C_MAX_SPEED_KHZ = 400
I2C_STANDARD_MODE_KHZ = 100
I2C_MIN_CYCLES_STANDARD = (252, 240)
"""Minimum (low, high) cycles at or below 100 kHz."""
I2C_MIN_CYCLES_FAST = (78, 36)
"""Minimum (low, high) cycles above 100 kHz."""

# ============================================================================
# EDGE: GPIO
# ============================================================================

# Group 0 (pins E0-E15). XR22800/1 only wire up bits 0-7.
REG_FUNC_SEL_0 = 0x03C0
REG_DIR_0 = 0x03C1
REG_SET_0 = 0x03C2
REG_CLEAR_0 = 0x03C3
REG_STATE_0 = 0x03C4
REG_TRI_STATE_0 = 0x03C5
REG_OPEN_DRAIN_0 = 0x03C6
REG_PULL_UP_0 = 0x03C7
REG_PULL_DOWN_0 = 0x03C8
REG_INTR_MASK_0 = 0x03C9
REG_INTR_POS_EDGE_0 = 0x03CA
REG_INTR_NEG_EDGE_0 = 0x03CB

# Group 1 (pins E16-E31). XR22802/4 only.
REG_FUNC_SEL_1 = 0x03CC
REG_DIR_1 = 0x03CD
REG_SET_1 = 0x03CE
REG_CLEAR_1 = 0x03CF
REG_STATE_1 = 0x03D0
REG_TRI_STATE_1 = 0x03D1
REG_OPEN_DRAIN_1 = 0x03D2
REG_PULL_UP_1 = 0x03D3
REG_PULL_DOWN_1 = 0x03D4
REG_INTR_MASK_1 = 0x03D5
REG_INTR_POS_EDGE_1 = 0x03D6
REG_INTR_NEG_EDGE_1 = 0x03D7

GPIO_GROUP_STRIDE = REG_FUNC_SEL_1 - REG_FUNC_SEL_0
"""Distance between a Group 0 register and its Group 1 twin."""

GPIO_PINS_PER_GROUP = 16
GPIO_MAX_PIN = 31
GPIO_COUNT_BASIC = 8
GPIO_COUNT_FULL = 32

CAPABILITY_DETECT_REGISTER = REG_FUNC_SEL_1
"""Only present on 32-GPIO silicon."""

# ============================================================================
# EDGE: PWM
# ============================================================================

REG_PWM0_CTRL = 0x03D8
REG_PWM0_HIGH = 0x03D9
REG_PWM0_LOW = 0x03DA
REG_PWM1_CTRL = 0x03DB
REG_PWM1_HIGH = 0x03DC
REG_PWM1_LOW = 0x03DD

PWM_CTRL_PIN_MASK = 0b0000_0000_0001_1111  # bits 4:0
PWM_CTRL_PIN_SHIFT = 0
PWM_CTRL_ENABLE_MASK = 0b0000_0000_0010_0000  # bit 5
PWM_CTRL_CMD_MASK = 0b0000_0001_1100_0000  # bits 8:6
PWM_CTRL_CMD_SHIFT = 6

PWM_CMD_IDLE = 0b000
PWM_CMD_ASSERT_LOW = 0b100
PWM_CMD_ONE_SHOT = 0b101
PWM_CMD_FREE_RUN = 0b110
PWM_CMD_RAW_MASK = 0b111

PWM_UNIT_TIME_NS = 1_000_000_000.0 / (60_000_000.0 / 16.0)
"""60 MHz / 16 = 3.75 MHz tick, ~266.667 ns."""
PWM_MIN_UNITS = 1
PWM_MAX_UNITS = 4095

# ============================================================================
# Register names (for logging and emulation)
# ============================================================================

REGISTER_NAMES = {
    REG_SCL_LOW: "SCL_LOW",
    REG_SCL_HIGH: "SCL_HIGH",
    REG_FUNC_SEL_0: "FUNC_SEL_0",
    REG_DIR_0: "DIR_0",
    REG_SET_0: "SET_0",
    REG_CLEAR_0: "CLEAR_0",
    REG_STATE_0: "STATE_0",
    REG_TRI_STATE_0: "TRI_STATE_0",
    REG_OPEN_DRAIN_0: "OPEN_DRAIN_0",
    REG_PULL_UP_0: "PULL_UP_0",
    REG_PULL_DOWN_0: "PULL_DOWN_0",
    REG_INTR_MASK_0: "INTR_MASK_0",
    REG_INTR_POS_EDGE_0: "INTR_POS_EDGE_0",
    REG_INTR_NEG_EDGE_0: "INTR_NEG_EDGE_0",
    REG_FUNC_SEL_1: "FUNC_SEL_1",
    REG_DIR_1: "DIR_1",
    REG_SET_1: "SET_1",
    REG_CLEAR_1: "CLEAR_1",
    REG_STATE_1: "STATE_1",
    REG_TRI_STATE_1: "TRI_STATE_1",
    REG_OPEN_DRAIN_1: "OPEN_DRAIN_1",
    REG_PULL_UP_1: "PULL_UP_1",
    REG_PULL_DOWN_1: "PULL_DOWN_1",
    REG_INTR_MASK_1: "INTR_MASK_1",
    REG_INTR_POS_EDGE_1: "INTR_POS_EDGE_1",
    REG_INTR_NEG_EDGE_1: "INTR_NEG_EDGE_1",
    REG_PWM0_CTRL: "PWM0_CTRL",
    REG_PWM0_HIGH: "PWM0_HIGH",
    REG_PWM0_LOW: "PWM0_LOW",
    REG_PWM1_CTRL: "PWM1_CTRL",
    REG_PWM1_HIGH: "PWM1_HIGH",
    REG_PWM1_LOW: "PWM1_LOW",
}


def register_name(address: int) -> str:
    """Return the symbolic name of a virtual register, or its hex address."""
    return REGISTER_NAMES.get(address, f"0x{address:04X}")
