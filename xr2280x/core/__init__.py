"""Core modules for the driver.

- consts: report ids, virtual register map, bit definitions
- exceptions: Xr2280xError hierarchy
- register_access: feature-report register reads and writes
- capabilities: 8 vs 32 GPIO detection
- gpio, gpio_pin, gpio_enums, gpio_transaction: GPIO control plane
- pwm: PWM channel controller
- i2c: I2C transaction engine
- interrupt: raw interrupt capture and speculative decode
- device: the Xr2280x handle tying it all together
"""
